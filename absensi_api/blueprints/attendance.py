# absensi_api/blueprints/attendance.py
from __future__ import annotations

from datetime import datetime, timedelta

from flask import Blueprint, request, current_app

from absensi_api.extensions import db
from absensi_api.common.http import ok, fail, parse_date, outlet_now, to_outlet_time
from absensi_api.models.attendance import AttendanceRecord
from absensi_api.models.employee import Employee
from absensi_api.services import stores
from absensi_api.services.attendance_capture import clock_in, clock_out
from absensi_api.services.payroll_engine import status_label, summarize_month

bp = Blueprint("attendance", __name__, url_prefix="/api/v1/attendance")


FUTURE_SKEW = timedelta(minutes=5)


def _now() -> datetime:
    """Outlet wall-clock time (naive), honouring an explicit 'at' in the payload."""
    d = request.get_json(silent=True) or {}
    at = d.get("at")
    if at:
        try:
            return to_outlet_time(datetime.fromisoformat(str(at).strip().replace(" ", "T")))
        except ValueError:
            return None
    return outlet_now()


def _check_now(now):
    if now is None:
        return fail("at must be an ISO datetime", 422)
    if now > outlet_now() + FUTURE_SKEW:
        return fail("Future timestamp not allowed", 422, code="FUTURE_TIMESTAMP")
    return None


def _hhmm(t):
    return t.strftime("%H:%M") if t else None


def _row(r: AttendanceRecord):
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "employee_name": r.employee.name if r.employee else None,
        "date": r.date.isoformat(),
        "clock_in": _hhmm(r.clock_in_time),
        "clock_out": _hhmm(r.clock_out_time),
        "status": r.status,
        "status_label": status_label(r.status, bool(r.is_late)),
        "is_late": bool(r.is_late),
        "leave_request_id": r.linked_leave_request_id,
    }


def _employee_id(d: dict):
    try:
        return int(d.get("employee_id"))
    except (TypeError, ValueError):
        return None


@bp.post("/clock-in")
def post_clock_in():
    """
    Body: {"employee_id": 2, "within_geofence": true, "latitude": -6.2, "longitude": 106.8,
           "at": "2025-11-03T07:58"}   # 'at' optional, defaults to now
    """
    d = request.get_json(silent=True) or {}
    emp_id = _employee_id(d)
    if not emp_id:
        return fail("employee_id is required", 422)
    if "within_geofence" not in d:
        return fail("within_geofence is required", 422)
    now = _now()
    err = _check_now(now)
    if err:
        return err

    rec = clock_in(emp_id, now, bool(d.get("within_geofence")),
                   latitude=d.get("latitude"), longitude=d.get("longitude"))
    return ok(_row(rec), 201)


@bp.post("/clock-out")
def post_clock_out():
    d = request.get_json(silent=True) or {}
    emp_id = _employee_id(d)
    if not emp_id:
        return fail("employee_id is required", 422)
    now = _now()
    err = _check_now(now)
    if err:
        return err
    return ok(_row(clock_out(emp_id, now)))


@bp.get("")
def list_attendance():
    """Attendance report rows for a date window, newest first."""
    d_from = parse_date(request.args.get("from")) if request.args.get("from") else None
    d_to = parse_date(request.args.get("to")) if request.args.get("to") else None
    if request.args.get("from") and not d_from:
        return fail("from must be YYYY-MM-DD", 422)
    if request.args.get("to") and not d_to:
        return fail("to must be YYYY-MM-DD", 422)
    if d_from and d_to and d_to < d_from:
        return fail("to must be >= from", 422)

    q = AttendanceRecord.query
    emp_id = request.args.get("employee_id", type=int)
    if emp_id:
        q = q.filter(AttendanceRecord.employee_id == emp_id)
    if d_from:
        q = q.filter(AttendanceRecord.date >= d_from)
    if d_to:
        q = q.filter(AttendanceRecord.date <= d_to)

    rows = q.order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc()).all()
    return ok([_row(r) for r in rows])


@bp.get("/summary")
def month_summary():
    """On-time / late / leave counts and remaining free quota for one employee's month."""
    emp_id = request.args.get("employee_id", type=int)
    if not emp_id:
        return fail("employee_id is required", 422)
    emp = db.get_or_404(Employee, emp_id)

    today = outlet_now().date()
    year = request.args.get("year", type=int) or today.year
    month = request.args.get("month", type=int) or today.month
    if not 1 <= month <= 12:
        return fail("month must be 1..12", 422)

    quota = current_app.config.get("FREE_LEAVE_QUOTA", 3)
    if emp.pay_override and emp.pay_override.free_leave_quota is not None:
        quota = emp.pay_override.free_leave_quota

    summary = summarize_month(stores.records_for(emp.id), year, month, int(quota))
    return ok({"employee_id": emp.id, **summary.to_dict()})
