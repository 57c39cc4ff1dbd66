# absensi_api/services/attendance_capture.py
from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional

from absensi_api.common.errors import APIError
from absensi_api.extensions import db
from absensi_api.models.attendance import AttendanceRecord, OutletConfig
from absensi_api.models.employee import Employee
from absensi_api.services.payroll_engine import LEAVE, PRESENT

log = logging.getLogger(__name__)


def is_late(clock_in: time, target: time) -> bool:
    """Late iff strictly after the outlet's start time, compared at minute resolution."""
    return (clock_in.hour, clock_in.minute) > (target.hour, target.minute)


def _active_employee(employee_id: int) -> Employee:
    emp = db.session.get(Employee, employee_id)
    if not emp:
        raise APIError("EMPLOYEE_NOT_FOUND", f"Employee {employee_id} not found", 404)
    if not emp.is_active:
        raise APIError("EMPLOYEE_INACTIVE", "Employee is inactive", 409)
    return emp


def clock_in(employee_id: int, now: datetime, within_geofence: bool,
             latitude: Optional[float] = None, longitude: Optional[float] = None) -> AttendanceRecord:
    """
    Record today's arrival. ``within_geofence`` is the verdict of the client's
    distance check against the outlet coordinates.
    """
    emp = _active_employee(employee_id)
    if not within_geofence:
        raise APIError("OUTSIDE_GEOFENCE", "Clock-in location is outside the outlet radius", 422)

    today = now.date()
    existing = AttendanceRecord.query.filter_by(employee_id=emp.id, date=today).all()
    if any(r.status == LEAVE for r in existing):
        raise APIError("ON_LEAVE", "Employee is on approved leave today", 409)
    if any(r.status == PRESENT and r.clock_in_time for r in existing):
        raise APIError("ALREADY_CLOCKED_IN", "Already clocked in today", 409)

    cfg = OutletConfig.current()
    at = now.time().replace(second=0, microsecond=0)
    rec = AttendanceRecord(
        employee_id=emp.id,
        date=today,
        clock_in_time=at,
        status=PRESENT,
        is_late=is_late(at, cfg.clock_in_time),
        latitude=latitude,
        longitude=longitude,
    )
    db.session.add(rec)
    db.session.commit()

    log.info("[attendance] clock-in emp=%s date=%s at=%s late=%s", emp.id, today, at, rec.is_late)
    return rec


def clock_out(employee_id: int, now: datetime) -> AttendanceRecord:
    emp = _active_employee(employee_id)
    today = now.date()
    rec = (AttendanceRecord.query
           .filter_by(employee_id=emp.id, date=today, status=PRESENT)
           .filter(AttendanceRecord.clock_in_time.isnot(None))
           .order_by(AttendanceRecord.id.asc())
           .first())
    if not rec:
        raise APIError("NOT_CLOCKED_IN", "No clock-in recorded today", 404)
    if rec.clock_out_time is not None:
        raise APIError("ALREADY_CLOCKED_OUT", "Already clocked out today", 409)

    rec.clock_out_time = now.time().replace(second=0, microsecond=0)
    db.session.commit()
    log.info("[attendance] clock-out emp=%s date=%s at=%s", emp.id, today, rec.clock_out_time)
    return rec
