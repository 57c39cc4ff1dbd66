# absensi_api/services/stores.py
"""Read-side adapters from the SQLAlchemy stores to the payroll engine's value objects."""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from absensi_api.extensions import db
from absensi_api.models.employee import Employee, PayOverride as PayOverrideRow
from absensi_api.models.attendance import AttendanceRecord
from absensi_api.models.payroll import PayrollAdjustment
from absensi_api.services.payroll_engine import AttendanceEntry, PayOverride, PayProfile


def to_entry(r: AttendanceRecord) -> AttendanceEntry:
    return AttendanceEntry(
        date=r.date,
        status=r.status,
        is_late=bool(r.is_late),
        employee_id=r.employee_id,
        clock_in=r.clock_in_time,
        clock_out=r.clock_out_time,
        leave_request_id=r.linked_leave_request_id,
    )


def to_override(o: Optional[PayOverrideRow]) -> Optional[PayOverride]:
    if o is None:
        return None
    return PayOverride(
        flat_period_base=o.flat_period_base,
        within_quota_charge=o.within_quota_charge,
        over_quota_charge=o.over_quota_charge,
        free_leave_quota=o.free_leave_quota,
        label=o.label,
    )


def to_profile(emp: Employee) -> PayProfile:
    return PayProfile(
        employee_id=emp.id,
        name=emp.name,
        username=emp.username,
        is_active=bool(emp.is_active),
        base_monthly_salary=emp.base_monthly_salary,
        monthly_meal_allowance=emp.monthly_meal_allowance,
        explicit_daily_deduction_rate=emp.explicit_daily_deduction_rate,
        payroll_method=emp.payroll_method,
        cash_advance_balance=emp.cash_advance_balance,
        override=to_override(emp.pay_override),
    )


def records_for(employee_id: int) -> List[AttendanceEntry]:
    """Every attendance record of the employee, oldest first, unfiltered by date."""
    rows = (AttendanceRecord.query
            .filter(AttendanceRecord.employee_id == employee_id)
            .order_by(AttendanceRecord.date.asc(), AttendanceRecord.id.asc())
            .all())
    return [to_entry(r) for r in rows]


def profile_for(employee_id: int) -> Optional[PayProfile]:
    emp = db.session.get(Employee, employee_id)
    return to_profile(emp) if emp else None


def adjustment_for(employee_id: int) -> Tuple[Decimal, Decimal]:
    adj = db.session.get(PayrollAdjustment, employee_id)
    if not adj:
        return Decimal("0"), Decimal("0")
    return Decimal(str(adj.bonus or 0)), Decimal(str(adj.manual_deduction or 0))
