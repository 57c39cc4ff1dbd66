from datetime import datetime
from absensi_api.extensions import db

class PayrollAdjustment(db.Model):
    __tablename__ = "payroll_adjustments"

    # one row per employee; the latest values apply to whichever period is computed
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True)
    bonus = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    manual_deduction = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")


class CashAdvanceEntry(db.Model):
    __tablename__ = "cash_advance_entries"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    delta = db.Column(db.Numeric(14, 2), nullable=False)          # +advance / -repayment
    balance_after = db.Column(db.Numeric(14, 2), nullable=False)
    note = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
