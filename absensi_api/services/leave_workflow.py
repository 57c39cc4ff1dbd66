# absensi_api/services/leave_workflow.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from absensi_api.common.errors import APIError
from absensi_api.extensions import db
from absensi_api.models.attendance import AttendanceRecord
from absensi_api.models.employee import Employee
from absensi_api.models.leave import LeaveRequest
from absensi_api.services.payroll_engine import ABSENT, LEAVE, LEAVE_PENDING

log = logging.getLogger(__name__)

PENDING = "PENDING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

# decision -> status written onto the linked attendance record
DECISION_TO_ATTENDANCE = {APPROVED: LEAVE, REJECTED: ABSENT}


def submit_leave(employee_id: int, day: date, reason: str,
                 evidence_photo_url: Optional[str] = None) -> LeaveRequest:
    """
    Create a PENDING leave request and its LEAVE_PENDING attendance record.

    The pending record already counts toward the monthly quota but is never
    charged until the owner decides.
    """
    emp = db.session.get(Employee, employee_id)
    if not emp:
        raise APIError("EMPLOYEE_NOT_FOUND", f"Employee {employee_id} not found", 404)
    if not emp.is_active:
        raise APIError("EMPLOYEE_INACTIVE", "Inactive employees cannot request leave", 409)

    lr = LeaveRequest(
        employee_id=emp.id,
        date=day,
        reason=reason,
        status=PENDING,
        evidence_photo_url=evidence_photo_url,
    )
    db.session.add(lr)
    db.session.flush()

    db.session.add(AttendanceRecord(
        employee_id=emp.id,
        date=day,
        status=LEAVE_PENDING,
        is_late=False,
        linked_leave_request_id=lr.id,
    ))
    db.session.commit()

    log.info("[leave] submitted id=%s emp=%s date=%s", lr.id, emp.id, day)
    return lr


def decide_leave(leave_request_id: int, decision: str) -> LeaveRequest:
    """PENDING -> APPROVED (record becomes LEAVE) or PENDING -> REJECTED (record becomes ABSENT)."""
    decision = (decision or "").strip().upper()
    if decision not in DECISION_TO_ATTENDANCE:
        raise APIError("INVALID_DECISION", "decision must be APPROVED or REJECTED", 422)

    lr = db.session.get(LeaveRequest, leave_request_id)
    if not lr:
        raise APIError("LEAVE_NOT_FOUND", f"Leave request {leave_request_id} not found", 404)
    if lr.status != PENDING:
        raise APIError("LEAVE_ALREADY_DECIDED", f"Cannot decide request in '{lr.status}' status", 409)

    target = DECISION_TO_ATTENDANCE[decision]
    lr.status = decision
    lr.decided_at = datetime.utcnow()

    linked = AttendanceRecord.query.filter_by(linked_leave_request_id=lr.id).all()
    if not linked:
        # requests created before linking existed: materialize the day's record
        linked = [AttendanceRecord(
            employee_id=lr.employee_id,
            date=lr.date,
            is_late=False,
            linked_leave_request_id=lr.id,
        )]
        db.session.add(linked[0])
    for rec in linked:
        rec.status = target

    db.session.commit()
    log.info("[leave] decided id=%s emp=%s -> %s (attendance %s)", lr.id, lr.employee_id, decision, target)
    return lr
