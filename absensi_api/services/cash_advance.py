# absensi_api/services/cash_advance.py
"""Kasbon ledger: the only code path that moves Employee.cash_advance_balance."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from absensi_api.common.errors import APIError
from absensi_api.extensions import db
from absensi_api.models.employee import Employee
from absensi_api.models.payroll import CashAdvanceEntry

log = logging.getLogger(__name__)


def next_balance(balance, delta) -> Decimal:
    """Positive delta records a new advance, negative a repayment; never below zero."""
    new = Decimal(str(balance or 0)) + Decimal(str(delta or 0))
    return max(Decimal("0"), new)


def adjust_cash_advance(employee_id: int, delta, note: Optional[str] = None) -> Decimal:
    emp = db.session.get(Employee, employee_id)
    if not emp:
        raise APIError("EMPLOYEE_NOT_FOUND", f"Employee {employee_id} not found", 404)

    old = Decimal(str(emp.cash_advance_balance or 0))
    new = next_balance(old, delta)
    emp.cash_advance_balance = new
    db.session.add(CashAdvanceEntry(
        employee_id=emp.id,
        delta=Decimal(str(delta)),
        balance_after=new,
        note=note,
    ))
    db.session.commit()

    log.info("[kasbon] emp=%s delta=%s balance %s -> %s", emp.id, delta, old, new)
    return new
