# absensi_api/services/payroll_engine.py
"""
Weekly payroll computation for the outlet staff.

Everything in here is pure: no Flask, no SQLAlchemy, no I/O. The caller
(see ``payroll_service``) loads an employee's profile, every attendance record
the employee has, and the owner's bonus/deduction, then hands fully
materialized values to ``compute_weekly_payroll``.

Rules reproduced from the outlet's legacy sheet:

  - one record per calendar date; duplicates collapse with precedence
    LEAVE > LEAVE_PENDING > PRESENT > ABSENT
  - a free leave quota per calendar month (default 3); Leave/Absent/Pending
    days all consume it, but only finalized LEAVE/ABSENT days are charged
  - the quota is recounted from the 1st of the month for every day of the
    pay period, so a period straddling two months uses each month's own count
  - days with no record at all are neither paid-present nor charged, unless
    ``PayrollSettings.charge_missing_days`` is switched on
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

log = logging.getLogger(__name__)

# ---- attendance statuses (stored verbatim in attendance_records.status) ----
PRESENT = "PRESENT"
LEAVE = "LEAVE"
ABSENT = "ABSENT"
LEAVE_PENDING = "LEAVE_PENDING"

ATTENDANCE_STATUSES = (PRESENT, LEAVE, ABSENT, LEAVE_PENDING)
LEAVE_LIKE = frozenset({LEAVE, ABSENT, LEAVE_PENDING})   # consume the monthly quota
CHARGEABLE = frozenset({LEAVE, ABSENT})                  # finalized, may be deducted

_PRECEDENCE = {LEAVE: 3, LEAVE_PENDING: 2, PRESENT: 1, ABSENT: 0}

# ---- payroll methods ----
DAILY_30 = "DAILY_30"   # (gapok + uang makan) / 30 per day of the period
FIXED_4 = "FIXED_4"     # (gapok + uang makan) / 4 per period

PAYROLL_METHODS = (DAILY_30, FIXED_4)
METHOD_LABELS = {
    DAILY_30: "Harian (Total / 30 Hari)",
    FIXED_4: "Mingguan (Total / 4 Minggu)",
}
FLAT_BASE_LABEL = "Gaji Flat per Periode"

ZERO = Decimal("0")


def _dec(x) -> Decimal:
    """None / blank count as zero; sparse profiles must not break the math."""
    if x is None or x == "":
        return ZERO
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


# ---------- value objects ----------

@dataclass(frozen=True)
class AttendanceEntry:
    date: date
    status: str
    is_late: bool = False
    employee_id: Any = None
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    leave_request_id: Any = None


@dataclass(frozen=True)
class PayOverride:
    """Special-case pay rule attached to one employee. Null fields fall back to the standard rule."""
    flat_period_base: Optional[Decimal] = None
    within_quota_charge: Optional[Decimal] = None
    over_quota_charge: Optional[Decimal] = None
    free_leave_quota: Optional[int] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class PayProfile:
    employee_id: Any
    name: str
    base_monthly_salary: Optional[Decimal] = None
    monthly_meal_allowance: Optional[Decimal] = None
    explicit_daily_deduction_rate: Optional[Decimal] = None
    payroll_method: str = DAILY_30
    cash_advance_balance: Optional[Decimal] = None
    username: Optional[str] = None
    is_active: bool = True
    override: Optional[PayOverride] = None


@dataclass(frozen=True)
class PayrollSettings:
    free_leave_quota: int = 3
    days_in_month: int = 30
    weeks_in_month: int = 4
    charge_missing_days: bool = False


@dataclass(frozen=True)
class PayBasis:
    gross: Decimal
    daily_rate: Decimal
    within_quota_charge: Decimal
    over_quota_charge: Decimal
    free_leave_quota: int
    label: str


@dataclass(frozen=True)
class PayrollReport:
    employee_id: Any
    employee_name: str
    period_start: str
    period_end: str
    present_count: int
    on_time_count: int
    late_count: int
    leave_count: int
    monthly_leave_count: int
    excess_leave_days_count: int
    gross_period_salary: Decimal
    bonus: Decimal
    manual_deduction: Decimal
    attendance_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    daily_deduction_rate_used: Decimal
    method_label: str
    cash_advance_balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {k: (float(v) if isinstance(v, Decimal) else v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    on_time: int
    late: int
    leaves: int
    pending: int
    remaining_quota: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------- building blocks ----------

def deduplicate_by_date(records: Iterable[AttendanceEntry]) -> Dict[date, AttendanceEntry]:
    """
    Collapse records to one per calendar date, ascending by date.

    Higher precedence wins (LEAVE > LEAVE_PENDING > PRESENT > ABSENT); on an
    exact status tie the first record seen is kept. Unknown statuses rank
    below everything.
    """
    chosen: Dict[date, AttendanceEntry] = {}
    for r in records:
        cur = chosen.get(r.date)
        if cur is None or _PRECEDENCE.get(r.status, -1) > _PRECEDENCE.get(cur.status, -1):
            chosen[r.date] = r
    return dict(sorted(chosen.items()))


def iter_days(start: date, end: date) -> Iterator[date]:
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def month_leave_count(by_date: Dict[date, AttendanceEntry], day: date) -> int:
    """Leave/Absent/Pending days from the 1st of ``day``'s month through ``day`` inclusive."""
    return sum(
        1 for d in iter_days(day.replace(day=1), day)
        if d in by_date and by_date[d].status in LEAVE_LIKE
    )


def resolve_pay_basis(profile: PayProfile, period_days: int, settings: PayrollSettings) -> PayBasis:
    gapok = _dec(profile.base_monthly_salary)
    meal = _dec(profile.monthly_meal_allowance)
    days_in_month = Decimal(settings.days_in_month)

    per_day = gapok / days_in_month + meal / days_in_month
    explicit = _dec(profile.explicit_daily_deduction_rate)
    daily_rate = explicit if explicit else per_day

    method = profile.payroll_method if profile.payroll_method in PAYROLL_METHODS else DAILY_30
    if method == FIXED_4:
        gross = (gapok + meal) / Decimal(settings.weeks_in_month)
    else:
        gross = per_day * period_days

    within, over = ZERO, daily_rate
    quota = settings.free_leave_quota
    label = METHOD_LABELS[method]

    ov = profile.override
    if ov is not None:
        if ov.flat_period_base is not None:
            gross = _dec(ov.flat_period_base)
            label = FLAT_BASE_LABEL
        if ov.within_quota_charge is not None:
            within = _dec(ov.within_quota_charge)
        if ov.over_quota_charge is not None:
            over = _dec(ov.over_quota_charge)
        if ov.free_leave_quota is not None:
            quota = int(ov.free_leave_quota)
        if ov.label:
            label = ov.label

    return PayBasis(
        gross=gross,
        daily_rate=daily_rate,
        within_quota_charge=within,
        over_quota_charge=over,
        free_leave_quota=quota,
        label=label,
    )


def _fill_missing_days(by_date: Dict[date, AttendanceEntry], start: date, end: date,
                       employee_id: Any) -> Dict[date, AttendanceEntry]:
    filled = dict(by_date)
    for d in iter_days(start, end):
        if d not in filled:
            filled[d] = AttendanceEntry(date=d, status=ABSENT, employee_id=employee_id)
    return dict(sorted(filled.items()))


# ---------- public API ----------

def compute_weekly_payroll(
    profile: PayProfile,
    records: Iterable[AttendanceEntry],
    period_start: date,
    period_end: date,
    bonus=0,
    manual_deduction=0,
    settings: Optional[PayrollSettings] = None,
) -> PayrollReport:
    """
    Compute one employee's payroll for the inclusive range [period_start, period_end].

    ``records`` must be the employee's full history (at least back to the 1st
    of period_start's month): the monthly quota looks behind the period.
    A reversed range yields a zero-activity report. ``bonus`` and
    ``manual_deduction`` are taken as given; callers validate sign.
    """
    settings = settings or PayrollSettings()
    bonus = _dec(bonus)
    manual_deduction = _dec(manual_deduction)

    by_date = deduplicate_by_date(records)
    period_days = (period_end - period_start).days + 1 if period_start <= period_end else 0
    if settings.charge_missing_days and period_days:
        by_date = _fill_missing_days(by_date, period_start, period_end, profile.employee_id)

    basis = resolve_pay_basis(profile, period_days, settings)

    present = on_time = late = leave = excess = 0
    monthly_leave = 0
    charges = ZERO

    for d in iter_days(period_start, period_end):
        so_far = month_leave_count(by_date, d)
        if (d.year, d.month) == (period_end.year, period_end.month):
            monthly_leave = so_far

        rec = by_date.get(d)
        if rec is None:
            continue

        if rec.status in LEAVE_LIKE:
            leave += 1
            if rec.status in CHARGEABLE:
                if so_far <= basis.free_leave_quota:
                    charges += basis.within_quota_charge
                else:
                    charges += basis.over_quota_charge
                    excess += 1
        elif rec.status == PRESENT:
            present += 1
            if rec.is_late:
                late += 1
            else:
                on_time += 1

    total_deductions = charges + manual_deduction
    net = max(ZERO, basis.gross + bonus - total_deductions)

    log.debug(
        "payroll emp=%s %s..%s gross=%s charges=%s net=%s",
        profile.employee_id, period_start, period_end, basis.gross, charges, net,
    )

    return PayrollReport(
        employee_id=profile.employee_id,
        employee_name=profile.name,
        period_start=period_start.isoformat(),
        period_end=period_end.isoformat(),
        present_count=present,
        on_time_count=on_time,
        late_count=late,
        leave_count=leave,
        monthly_leave_count=monthly_leave,
        excess_leave_days_count=excess,
        gross_period_salary=basis.gross,
        bonus=bonus,
        manual_deduction=manual_deduction,
        attendance_deduction=charges,
        total_deductions=total_deductions,
        net_salary=net,
        daily_deduction_rate_used=basis.over_quota_charge,
        method_label=basis.label,
        cash_advance_balance=_dec(profile.cash_advance_balance),
    )


def default_pay_period(today: date) -> Tuple[date, date]:
    """Friday..Thursday week whose Thursday is today or the next one."""
    end = today + timedelta(days=(3 - today.weekday()) % 7)
    return end - timedelta(days=6), end


def summarize_month(records: Iterable[AttendanceEntry], year: int, month: int,
                    free_leave_quota: int = 3) -> MonthlySummary:
    """Month counters for the employee home screen; pending days use up quota as in payroll."""
    on_time = late = leaves = pending = 0
    for d, r in deduplicate_by_date(records).items():
        if (d.year, d.month) != (year, month):
            continue
        if r.status == PRESENT:
            if r.is_late:
                late += 1
            else:
                on_time += 1
        elif r.status in CHARGEABLE:
            leaves += 1
        elif r.status == LEAVE_PENDING:
            pending += 1
    return MonthlySummary(
        year=year,
        month=month,
        on_time=on_time,
        late=late,
        leaves=leaves,
        pending=pending,
        remaining_quota=max(0, free_leave_quota - leaves - pending),
    )


def status_label(status: str, is_late: bool = False) -> str:
    if status == PRESENT:
        return "TERLAMBAT" if is_late else "HADIR"
    if status == LEAVE_PENDING:
        return "MENUNGGU"
    if status == LEAVE:
        return "IZIN"
    return "ABSEN"
