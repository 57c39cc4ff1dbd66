from decimal import Decimal

import pytest

from absensi_api.common.errors import APIError
from absensi_api.extensions import db
from absensi_api.models.employee import Employee
from absensi_api.models.payroll import CashAdvanceEntry
from absensi_api.services.cash_advance import adjust_cash_advance, next_balance


def test_next_balance_clamps_at_zero():
    assert next_balance(0, 250_000) == Decimal("250000")
    assert next_balance(Decimal("100000"), -40_000) == Decimal("60000")
    assert next_balance(Decimal("100000"), -150_000) == Decimal("0")
    assert next_balance(None, None) == Decimal("0")


def test_adjust_writes_ledger_and_balance(make_employee):
    e = make_employee()
    assert adjust_cash_advance(e.id, Decimal("250000"), "advance") == Decimal("250000")
    assert adjust_cash_advance(e.id, Decimal("-300000"), "repayment") == Decimal("0")

    emp = db.session.get(Employee, e.id)
    assert emp.cash_advance_balance == 0

    entries = CashAdvanceEntry.query.filter_by(employee_id=e.id).order_by(CashAdvanceEntry.id).all()
    assert [x.delta for x in entries] == [Decimal("250000"), Decimal("-300000")]
    assert [x.balance_after for x in entries] == [Decimal("250000"), Decimal("0")]
    assert entries[1].note == "repayment"


def test_adjust_unknown_employee(app):
    with pytest.raises(APIError) as ei:
        adjust_cash_advance(404, Decimal("1000"))
    assert ei.value.status_code == 404
