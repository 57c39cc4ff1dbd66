# absensi_api/blueprints/leave.py
from __future__ import annotations

from flask import Blueprint, request

from absensi_api.common.http import ok, fail, parse_date
from absensi_api.models.leave import LeaveRequest
from absensi_api.services.leave_workflow import decide_leave, submit_leave

bp = Blueprint("leave", __name__, url_prefix="/api/v1/leave")


def _row(r: LeaveRequest):
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "employee_name": r.employee.name if r.employee else None,
        "date": r.date.isoformat(),
        "reason": r.reason,
        "status": r.status,
        "evidence_photo_url": r.evidence_photo_url,
        "decided_at": r.decided_at.isoformat() if r.decided_at else None,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }


@bp.post("/requests")
def apply_leave():
    d = request.get_json(silent=True) or {}
    if any(not d.get(k) for k in ("employee_id", "date", "reason")):
        return fail("employee_id, date and reason are required", 422)
    day = parse_date(d["date"])
    if not day:
        return fail("Invalid date", 422)
    try:
        emp_id = int(d["employee_id"])
    except (TypeError, ValueError):
        return fail("employee_id must be integer", 422)

    lr = submit_leave(emp_id, day, str(d["reason"]).strip(), d.get("evidence_photo_url"))
    return ok(_row(lr), 201)


@bp.get("/requests")
def list_requests():
    q = LeaveRequest.query
    emp_id = request.args.get("employee_id", type=int)
    if emp_id:
        q = q.filter(LeaveRequest.employee_id == emp_id)
    status = (request.args.get("status") or "").strip().upper()
    if status:
        q = q.filter(LeaveRequest.status == status)
    items = q.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()
    return ok([_row(r) for r in items])


@bp.post("/requests/<int:rid>/decision")
def decide_request(rid: int):
    """Body: {"decision": "APPROVED" | "REJECTED"}"""
    d = request.get_json(silent=True) or {}
    return ok(_row(decide_leave(rid, d.get("decision"))))
