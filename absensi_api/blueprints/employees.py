# absensi_api/blueprints/employees.py
from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, request

from absensi_api.extensions import db
from absensi_api.common.http import ok, fail, parse_dec, flt
from absensi_api.models.employee import Employee, PayOverride
from absensi_api.models.payroll import CashAdvanceEntry
from absensi_api.services.cash_advance import adjust_cash_advance
from absensi_api.services.payroll_engine import PAYROLL_METHODS, DAILY_30

bp = Blueprint("employees", __name__, url_prefix="/api/v1/employees")

_MONEY_FIELDS = ("base_monthly_salary", "monthly_meal_allowance", "explicit_daily_deduction_rate")


# ---------- row shapes ----------
def _override_row(o: PayOverride | None):
    if o is None:
        return None
    return {
        "flat_period_base": flt(o.flat_period_base),
        "within_quota_charge": flt(o.within_quota_charge),
        "over_quota_charge": flt(o.over_quota_charge),
        "free_leave_quota": o.free_leave_quota,
        "label": o.label,
    }

def _row(e: Employee):
    return {
        "id": e.id,
        "name": e.name,
        "username": e.username,
        "is_active": e.is_active,
        "base_monthly_salary": flt(e.base_monthly_salary),
        "monthly_meal_allowance": flt(e.monthly_meal_allowance),
        "explicit_daily_deduction_rate": flt(e.explicit_daily_deduction_rate),
        "payroll_method": e.payroll_method,
        "cash_advance_balance": flt(e.cash_advance_balance),
        "pay_override": _override_row(e.pay_override),
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }

def _entry_row(x: CashAdvanceEntry):
    return {
        "id": x.id,
        "employee_id": x.employee_id,
        "delta": flt(x.delta),
        "balance_after": flt(x.balance_after),
        "note": x.note,
        "created_at": x.created_at.isoformat() if x.created_at else None,
    }


def _apply_money(e: Employee, d: dict):
    """Copy non-negative money fields from payload; returns an error message or None."""
    for k in _MONEY_FIELDS:
        if k not in d:
            continue
        if d[k] is None or d[k] == "":
            if k == "explicit_daily_deduction_rate":
                setattr(e, k, None)
                continue
            return f"{k} cannot be empty"
        v = parse_dec(d[k])
        if v is None or v < 0:
            return f"{k} must be a non-negative number"
        setattr(e, k, v)
    return None


def _as_bool(v):
    """true/false from JSON bools or query-string style text; None when unrecognised."""
    if isinstance(v, bool):
        return v
    s = str(v if v is not None else "").strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    return None


# ---------- routes ----------
@bp.get("")
def list_employees():
    q = Employee.query
    is_active = request.args.get("is_active")
    if is_active is not None:
        v = _as_bool(is_active)
        if v is None:
            return fail("is_active must be true/false", 422)
        q = q.filter(Employee.is_active.is_(v))
    return ok([_row(e) for e in q.order_by(Employee.name.asc()).all()])


@bp.post("")
def create_employee():
    d = request.get_json(silent=True) or {}
    name = (d.get("name") or "").strip()
    username = (d.get("username") or "").strip().lower()
    if not name or not username:
        return fail("name and username are required", 422)
    if Employee.query.filter_by(username=username).first():
        return fail("username already exists", 409, code="DUPLICATE_USERNAME")

    method = (d.get("payroll_method") or DAILY_30).strip().upper()
    if method not in PAYROLL_METHODS:
        return fail(f"payroll_method must be one of {', '.join(PAYROLL_METHODS)}", 422)

    e = Employee(name=name, username=username, payroll_method=method, is_active=True,
                 base_monthly_salary=Decimal("0"), monthly_meal_allowance=Decimal("0"),
                 cash_advance_balance=Decimal("0"))
    err = _apply_money(e, d)
    if err:
        return fail(err, 422)

    db.session.add(e)
    db.session.commit()
    return ok(_row(e), 201)


@bp.get("/<int:emp_id>")
def get_employee(emp_id: int):
    return ok(_row(db.get_or_404(Employee, emp_id)))


@bp.patch("/<int:emp_id>")
def update_employee(emp_id: int):
    e = db.get_or_404(Employee, emp_id)
    d = request.get_json(silent=True) or {}

    if "name" in d:
        name = (d.get("name") or "").strip()
        if not name:
            return fail("name cannot be empty", 422)
        e.name = name
    if "username" in d:
        username = (d.get("username") or "").strip().lower()
        if not username:
            return fail("username cannot be empty", 422)
        clash = Employee.query.filter(Employee.username == username, Employee.id != e.id).first()
        if clash:
            return fail("username already exists", 409, code="DUPLICATE_USERNAME")
        e.username = username
    if "payroll_method" in d:
        method = (d.get("payroll_method") or "").strip().upper()
        if method not in PAYROLL_METHODS:
            return fail(f"payroll_method must be one of {', '.join(PAYROLL_METHODS)}", 422)
        e.payroll_method = method
    if "is_active" in d:
        v = _as_bool(d["is_active"])
        if v is None:
            return fail("is_active must be true/false", 422)
        e.is_active = v
    if "cash_advance_balance" in d:
        return fail("cash_advance_balance is changed through the kasbon ledger", 422)

    err = _apply_money(e, d)
    if err:
        return fail(err, 422)

    db.session.commit()
    return ok(_row(e))


@bp.delete("/<int:emp_id>")
def deactivate_employee(emp_id: int):
    # attendance history stays; the employee just drops out of payroll runs
    e = db.get_or_404(Employee, emp_id)
    e.is_active = False
    db.session.commit()
    return ok({"id": e.id, "is_active": False})


# ---------- special pay rule ----------
@bp.put("/<int:emp_id>/pay-override")
def put_pay_override(emp_id: int):
    e = db.get_or_404(Employee, emp_id)
    d = request.get_json(silent=True) or {}

    o = e.pay_override or PayOverride(employee_id=e.id)
    for k in ("flat_period_base", "within_quota_charge", "over_quota_charge"):
        if k not in d:
            continue
        if d[k] is None:
            setattr(o, k, None)
            continue
        v = parse_dec(d[k])
        if v is None or v < 0:
            return fail(f"{k} must be a non-negative number", 422)
        setattr(o, k, v)
    if "free_leave_quota" in d:
        q = d["free_leave_quota"]
        if q is not None:
            try:
                q = int(q)
            except (TypeError, ValueError):
                return fail("free_leave_quota must be an integer", 422)
            if q < 0:
                return fail("free_leave_quota must be >= 0", 422)
        o.free_leave_quota = q
    if "label" in d:
        o.label = (d.get("label") or "").strip() or None

    e.pay_override = o
    db.session.commit()
    return ok(_row(e))


@bp.delete("/<int:emp_id>/pay-override")
def delete_pay_override(emp_id: int):
    e = db.get_or_404(Employee, emp_id)
    e.pay_override = None
    db.session.commit()
    return ok(_row(e))


# ---------- kasbon ledger ----------
@bp.get("/<int:emp_id>/kasbon")
def kasbon_history(emp_id: int):
    e = db.get_or_404(Employee, emp_id)
    rows = (CashAdvanceEntry.query
            .filter_by(employee_id=e.id)
            .order_by(CashAdvanceEntry.created_at.desc(), CashAdvanceEntry.id.desc())
            .all())
    return ok([_entry_row(x) for x in rows], balance=flt(e.cash_advance_balance))


@bp.post("/<int:emp_id>/kasbon")
def kasbon_adjust(emp_id: int):
    """
    Body: {"delta": 250000, "note": "advance"}   positive = new advance
          {"delta": -50000, "note": "repayment"} negative = repayment
    """
    d = request.get_json(silent=True) or {}
    delta = parse_dec(d.get("delta"))
    if delta is None or delta == 0:
        return fail("delta required and non-zero", 422)
    note = (d.get("note") or "").strip() or None
    balance = adjust_cash_advance(emp_id, delta, note)
    return ok({"employee_id": emp_id, "cash_advance_balance": flt(balance)})
