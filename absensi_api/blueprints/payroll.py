# absensi_api/blueprints/payroll.py
from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, request

from absensi_api.extensions import db
from absensi_api.common.http import ok, fail, parse_date, parse_dec, flt, outlet_now
from absensi_api.models.employee import Employee
from absensi_api.models.payroll import PayrollAdjustment
from absensi_api.services.payroll_engine import default_pay_period
from absensi_api.services.payroll_service import payroll_for, payroll_for_active

bp = Blueprint("payroll", __name__, url_prefix="/api/v1/payroll")


def _period():
    """
    ?start=YYYY-MM-DD&end=YYYY-MM-DD; both default to the current Friday..Thursday week.
    A reversed range is passed through (the engine returns a zero-activity report).
    """
    raw_s, raw_e = request.args.get("start"), request.args.get("end")
    start = parse_date(raw_s) if raw_s else None
    end = parse_date(raw_e) if raw_e else None
    if (raw_s and not start) or (raw_e and not end):
        return None, None, "start/end must be YYYY-MM-DD"
    d_start, d_end = default_pay_period(outlet_now().date())
    return start or d_start, end or d_end, None


def _adj_row(emp_id: int, a: PayrollAdjustment | None):
    return {
        "employee_id": emp_id,
        "bonus": flt(a.bonus) if a else 0.0,
        "manual_deduction": flt(a.manual_deduction) if a else 0.0,
        "updated_at": a.updated_at.isoformat() if a and a.updated_at else None,
    }


@bp.get("")
def payroll_all():
    start, end, err = _period()
    if err:
        return fail(err, 422)
    reports = payroll_for_active(start, end)
    total_net = sum((r.net_salary for r in reports), Decimal("0"))
    return ok([r.to_dict() for r in reports],
              period_start=start.isoformat(), period_end=end.isoformat(), total_net=flt(total_net))


@bp.get("/<int:emp_id>")
def payroll_one(emp_id: int):
    start, end, err = _period()
    if err:
        return fail(err, 422)
    return ok(payroll_for(emp_id, start, end).to_dict())


# ---------- owner adjustments (bonus / potongan) ----------
@bp.get("/adjustments/<int:emp_id>")
def get_adjustment(emp_id: int):
    db.get_or_404(Employee, emp_id)
    return ok(_adj_row(emp_id, db.session.get(PayrollAdjustment, emp_id)))


@bp.put("/adjustments/<int:emp_id>")
def put_adjustment(emp_id: int):
    """Body: {"bonus": 50000, "manual_deduction": 20000}; omitted fields keep their value."""
    db.get_or_404(Employee, emp_id)
    d = request.get_json(silent=True) or {}

    a = db.session.get(PayrollAdjustment, emp_id)
    if a is None:
        a = PayrollAdjustment(employee_id=emp_id, bonus=Decimal("0"), manual_deduction=Decimal("0"))
        db.session.add(a)

    for k in ("bonus", "manual_deduction"):
        if k not in d:
            continue
        v = parse_dec(d[k]) if d[k] not in (None, "") else Decimal("0")
        if v is None or v < 0:
            db.session.rollback()
            return fail(f"{k} must be a non-negative number", 422)
        setattr(a, k, v)

    db.session.commit()
    return ok(_adj_row(emp_id, a))
