from datetime import datetime
from absensi_api.extensions import db

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    name     = db.Column(db.String(120), nullable=False)
    username = db.Column(db.String(60), unique=True, nullable=False)   # login handle, never a pay rule
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # compensation (Rupiah, whole units)
    base_monthly_salary    = db.Column(db.Numeric(14, 2), nullable=True, default=0)   # gapok
    monthly_meal_allowance = db.Column(db.Numeric(14, 2), nullable=True, default=0)   # uang makan
    explicit_daily_deduction_rate = db.Column(db.Numeric(14, 2), nullable=True)
    payroll_method = db.Column(db.String(16), nullable=False, default="DAILY_30")      # DAILY_30 | FIXED_4

    # kasbon; only moved by the cash-advance ledger
    cash_advance_balance = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    pay_override = db.relationship(
        "PayOverride", uselist=False, back_populates="employee", cascade="all, delete-orphan"
    )


class PayOverride(db.Model):
    """Per-employee exception to the standard pay formula.

    Every column is optional; a null column falls back to the standard rule.
    """
    __tablename__ = "pay_overrides"

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True)

    flat_period_base    = db.Column(db.Numeric(14, 2), nullable=True)  # replaces the day-count gross
    within_quota_charge = db.Column(db.Numeric(14, 2), nullable=True)  # per leave day while quota lasts
    over_quota_charge   = db.Column(db.Numeric(14, 2), nullable=True)  # per leave day beyond the quota
    free_leave_quota    = db.Column(db.Integer, nullable=True)
    label = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", back_populates="pay_override")
