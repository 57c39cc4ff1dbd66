from datetime import datetime, time
from absensi_api.extensions import db

class AttendanceRecord(db.Model):
    __tablename__ = "attendance_records"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    clock_in_time  = db.Column(db.Time, nullable=True)
    clock_out_time = db.Column(db.Time, nullable=True)
    is_late = db.Column(db.Boolean, nullable=False, default=False)
    status  = db.Column(db.String(16), nullable=False, default="PRESENT")  # PRESENT|LEAVE|ABSENT|LEAVE_PENDING
    linked_leave_request_id = db.Column(
        db.Integer, db.ForeignKey("leave_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    latitude  = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # no unique (employee_id, date): upstream can race, payroll collapses duplicates
    __table_args__ = (
        db.Index("ix_attendance_emp_date", "employee_id", "date"),
    )

    employee = db.relationship("Employee", lazy="joined")


class OutletConfig(db.Model):
    __tablename__ = "outlet_config"

    id = db.Column(db.Integer, primary_key=True)
    latitude  = db.Column(db.Float, nullable=False, default=-6.2)
    longitude = db.Column(db.Float, nullable=False, default=106.816666)
    radius_m  = db.Column(db.Integer, nullable=False, default=100)
    clock_in_time  = db.Column(db.Time, nullable=False, default=time(8, 0))
    clock_out_time = db.Column(db.Time, nullable=False, default=time(17, 0))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def current(cls) -> "OutletConfig":
        """Return the single config row, creating it with defaults on first use."""
        cfg = cls.query.order_by(cls.id.asc()).first()
        if not cfg:
            cfg = cls(latitude=-6.2, longitude=106.816666, radius_m=100,
                      clock_in_time=time(8, 0), clock_out_time=time(17, 0))
            db.session.add(cfg)
            db.session.commit()
        return cfg
