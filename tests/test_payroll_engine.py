from datetime import date, timedelta
from decimal import Decimal

from absensi_api.services.payroll_engine import (
    ABSENT, LEAVE, LEAVE_PENDING, PRESENT,
    AttendanceEntry, PayOverride, PayProfile, PayrollSettings,
    compute_weekly_payroll, deduplicate_by_date, default_pay_period,
    month_leave_count, status_label, summarize_month,
)

# Fri 2025-11-07 .. Thu 2025-11-13
START = date(2025, 11, 7)
END = date(2025, 11, 13)


def _profile(**kw):
    base = dict(employee_id=1, name="Budi", base_monthly_salary=Decimal("3000000"),
                monthly_meal_allowance=Decimal("0"), payroll_method="DAILY_30")
    base.update(kw)
    return PayProfile(**base)


def _rec(d, status=PRESENT, late=False):
    return AttendanceEntry(date=d, status=status, is_late=late, employee_id=1)


def _week(status=PRESENT, start=START):
    return [_rec(start + timedelta(days=i), status) for i in range(7)]


# ---------- scenarios ----------

def test_full_week_present_daily_30():
    r = compute_weekly_payroll(_profile(), _week(), START, END)
    assert r.gross_period_salary == Decimal("700000")
    assert r.total_deductions == 0
    assert r.net_salary == Decimal("700000")
    assert (r.present_count, r.on_time_count, r.late_count, r.leave_count) == (7, 7, 0, 0)
    assert r.method_label == "Harian (Total / 30 Hari)"
    assert r.period_start == "2025-11-07" and r.period_end == "2025-11-13"


def test_fourth_leave_of_month_is_charged_daily_rate():
    history = [_rec(date(2025, 11, d), LEAVE) for d in (1, 3, 5)]
    history += [_rec(START, LEAVE)] + [_rec(START + timedelta(days=i)) for i in range(1, 7)]

    r = compute_weekly_payroll(_profile(), history, START, END)
    assert r.daily_deduction_rate_used == Decimal("100000")
    assert r.excess_leave_days_count == 1
    assert r.leave_count == 1
    assert r.monthly_leave_count == 4
    assert r.total_deductions == Decimal("100000")
    assert r.net_salary == Decimal("600000")


def test_bonus_and_manual_deduction():
    r = compute_weekly_payroll(_profile(), _week(), START, END, bonus=50_000, manual_deduction=20_000)
    assert r.bonus == Decimal("50000")
    assert r.manual_deduction == Decimal("20000")
    assert r.total_deductions == Decimal("20000")
    assert r.net_salary == Decimal("730000")


def test_same_day_present_and_pending_counts_as_leave():
    history = _week()
    history.append(_rec(START + timedelta(days=2), LEAVE_PENDING))

    r = compute_weekly_payroll(_profile(), history, START, END)
    assert r.present_count == 6
    assert r.leave_count == 1
    assert r.total_deductions == 0


def test_reversed_period_is_zero_activity():
    r = compute_weekly_payroll(_profile(), _week(), END, START)
    assert (r.present_count, r.leave_count, r.monthly_leave_count, r.excess_leave_days_count) == (0, 0, 0, 0)
    assert r.gross_period_salary == 0
    assert r.total_deductions == 0
    assert r.net_salary == 0

    fixed = compute_weekly_payroll(_profile(payroll_method="FIXED_4"), _week(), END, START)
    assert fixed.gross_period_salary == Decimal("750000")
    assert fixed.net_salary == Decimal("750000")


# ---------- pay basis ----------

def test_fixed_weekly_quarter_ignores_period_length():
    p = _profile(payroll_method="FIXED_4", monthly_meal_allowance=Decimal("600000"))
    r = compute_weekly_payroll(p, [], START, START + timedelta(days=9))
    assert r.gross_period_salary == Decimal("900000")
    assert r.method_label == "Mingguan (Total / 4 Minggu)"


def test_meal_allowance_is_part_of_daily_rate():
    p = _profile(monthly_meal_allowance=Decimal("600000"))
    r = compute_weekly_payroll(p, _week(), START, END)
    assert r.daily_deduction_rate_used == Decimal("120000")
    assert r.gross_period_salary == Decimal("840000")


def test_explicit_deduction_rate_overrides_derived_rate():
    history = [_rec(date(2025, 11, d), ABSENT) for d in (1, 2, 3, 7)]
    r = compute_weekly_payroll(_profile(explicit_daily_deduction_rate=Decimal("25000")), history, START, END)
    assert r.daily_deduction_rate_used == Decimal("25000")
    assert r.total_deductions == Decimal("25000")


def test_zero_explicit_rate_falls_back_to_derived_rate():
    r = compute_weekly_payroll(_profile(explicit_daily_deduction_rate=Decimal("0")), [], START, END)
    assert r.daily_deduction_rate_used == Decimal("100000")


def test_sparse_profile_does_not_fail():
    p = PayProfile(employee_id="x1", name="Baru")
    r = compute_weekly_payroll(p, _week(), START, END)
    assert r.gross_period_salary == 0
    assert r.net_salary == 0
    assert r.cash_advance_balance == 0


def test_unknown_method_falls_back_to_daily():
    r = compute_weekly_payroll(_profile(payroll_method="HOURLY"), [], START, END)
    assert r.gross_period_salary == Decimal("700000")


def test_override_flat_base_and_two_tier_charges():
    ov = PayOverride(flat_period_base=Decimal("900000"), within_quota_charge=Decimal("20000"),
                     over_quota_charge=Decimal("50000"))
    history = [_rec(date(2025, 11, 1), LEAVE), _rec(date(2025, 11, 2), LEAVE)]
    history += [_rec(START + timedelta(days=i), LEAVE) for i in range(3)]   # 3rd, 4th, 5th of month

    r = compute_weekly_payroll(_profile(override=ov), history, START, END)
    assert r.gross_period_salary == Decimal("900000")
    assert r.excess_leave_days_count == 2
    # one within-quota day (3rd) + two over-quota days
    assert r.total_deductions == Decimal("120000")
    assert r.net_salary == Decimal("780000")
    assert r.daily_deduction_rate_used == Decimal("50000")
    assert r.method_label == "Gaji Flat per Periode"


def test_override_quota_and_label():
    ov = PayOverride(free_leave_quota=0, label="Khusus")
    r = compute_weekly_payroll(_profile(override=ov), [_rec(START, ABSENT)], START, END)
    assert r.excess_leave_days_count == 1
    assert r.total_deductions == Decimal("100000")
    assert r.method_label == "Khusus"


# ---------- quota rules ----------

def test_pending_consumes_quota_but_is_never_charged():
    history = [_rec(date(2025, 11, d), LEAVE_PENDING) for d in (7, 8, 9, 10)]
    history.append(_rec(date(2025, 11, 11), LEAVE))

    r = compute_weekly_payroll(_profile(), history, START, END)
    assert r.leave_count == 5
    assert r.monthly_leave_count == 5
    assert r.excess_leave_days_count == 1
    assert r.total_deductions == Decimal("100000")


def test_quota_is_per_calendar_month_across_boundary():
    # Wed 2025-10-29 .. Tue 2025-11-04
    start, end = date(2025, 10, 29), date(2025, 11, 4)
    history = [_rec(date(2025, 10, d), LEAVE) for d in (1, 2, 3)]
    history += [_rec(date(2025, 10, 30), ABSENT), _rec(date(2025, 11, 3), LEAVE)]

    r = compute_weekly_payroll(_profile(), history, start, end)
    assert r.leave_count == 2
    assert r.excess_leave_days_count == 1        # Oct 30 is October's 4th, Nov 3 is November's 1st
    assert r.monthly_leave_count == 1
    assert r.total_deductions == Decimal("100000")


def test_quota_monotonicity():
    month_start = date(2025, 11, 1)
    history = [_rec(month_start + timedelta(days=i), LEAVE) for i in range(10)]

    prev_monthly, prev_excess = 0, 0
    for k in range(1, 11):
        end = month_start + timedelta(days=k - 1)
        r = compute_weekly_payroll(_profile(), history, month_start, end)
        assert r.monthly_leave_count == k
        assert r.monthly_leave_count >= prev_monthly
        assert r.excess_leave_days_count == max(0, k - 3)
        assert r.excess_leave_days_count >= prev_excess
        prev_monthly, prev_excess = r.monthly_leave_count, r.excess_leave_days_count


def test_records_outside_period_only_feed_monthly_count():
    history = _week()
    history += [
        _rec(date(2025, 11, 3), LEAVE),
        _rec(date(2025, 11, 4), PRESENT, late=True),
        _rec(date(2025, 11, 20), ABSENT),            # after period end: ignored entirely
        _rec(date(2025, 10, 31), LEAVE),             # previous month
    ]
    r = compute_weekly_payroll(_profile(), history, START, END)
    assert (r.present_count, r.on_time_count, r.late_count, r.leave_count) == (7, 7, 0, 0)
    assert r.monthly_leave_count == 1


def test_missing_days_are_skipped_by_default():
    history = [_rec(START), _rec(START + timedelta(days=1))]
    r = compute_weekly_payroll(_profile(), history, START, END)
    assert r.present_count == 2
    assert r.leave_count == 0
    assert r.total_deductions == 0


def test_missing_days_charged_when_enabled():
    settings = PayrollSettings(charge_missing_days=True)
    history = [_rec(date(2025, 11, d), LEAVE) for d in (1, 2, 3)]
    history += [_rec(START + timedelta(days=i)) for i in range(5)]

    r = compute_weekly_payroll(_profile(), history, START, END, settings=settings)
    assert r.leave_count == 2
    assert r.excess_leave_days_count == 2
    assert r.total_deductions == Decimal("200000")


# ---------- properties ----------

def test_deterministic():
    history = _week() + [_rec(date(2025, 11, 2), ABSENT), _rec(START, LEAVE_PENDING)]
    a = compute_weekly_payroll(_profile(), history, START, END, bonus=1000)
    b = compute_weekly_payroll(_profile(), list(history), START, END, bonus=1000)
    assert a == b


def test_net_never_negative():
    history = [_rec(START + timedelta(days=i), ABSENT) for i in range(7)]
    r = compute_weekly_payroll(_profile(), history, START, END, manual_deduction=5_000_000)
    assert r.net_salary == 0
    assert r.total_deductions > r.gross_period_salary


def test_lower_precedence_duplicate_changes_nothing():
    history = _week()
    history[3] = _rec(history[3].date, LEAVE)
    base = compute_weekly_payroll(_profile(), history, START, END)

    noisy = history + [_rec(history[3].date, ABSENT), _rec(history[0].date, ABSENT)]
    assert compute_weekly_payroll(_profile(), noisy, START, END) == base


# ---------- helpers ----------

def test_deduplicate_precedence_and_order():
    d1, d2 = date(2025, 11, 2), date(2025, 11, 1)
    out = deduplicate_by_date([
        _rec(d1, ABSENT), _rec(d1, PRESENT), _rec(d1, LEAVE_PENDING), _rec(d1, LEAVE),
        _rec(d2, PRESENT), _rec(d2, ABSENT),
    ])
    assert list(out) == [d2, d1]
    assert out[d1].status == LEAVE
    assert out[d2].status == PRESENT


def test_month_leave_count_counts_from_first_of_month():
    by_date = deduplicate_by_date([
        _rec(date(2025, 10, 31), LEAVE),
        _rec(date(2025, 11, 1), ABSENT),
        _rec(date(2025, 11, 2), PRESENT),
        _rec(date(2025, 11, 5), LEAVE_PENDING),
    ])
    assert month_leave_count(by_date, date(2025, 11, 4)) == 1
    assert month_leave_count(by_date, date(2025, 11, 5)) == 2


def test_default_pay_period_friday_to_thursday():
    assert default_pay_period(date(2025, 11, 10)) == (START, END)      # Monday
    assert default_pay_period(date(2025, 11, 13)) == (START, END)      # Thursday
    assert default_pay_period(date(2025, 11, 14)) == (date(2025, 11, 14), date(2025, 11, 20))


def test_summarize_month():
    history = [
        _rec(date(2025, 11, 3)), _rec(date(2025, 11, 4), late=True),
        _rec(date(2025, 11, 5), LEAVE), _rec(date(2025, 11, 6), ABSENT),
        _rec(date(2025, 11, 7), LEAVE_PENDING), _rec(date(2025, 10, 7), LEAVE),
    ]
    s = summarize_month(history, 2025, 11, free_leave_quota=3)
    assert (s.on_time, s.late, s.leaves, s.pending, s.remaining_quota) == (1, 1, 2, 1, 0)


def test_summary_quota_agrees_with_payroll_when_pending():
    history = [_rec(date(2025, 11, d), LEAVE_PENDING) for d in (3, 4, 5)]
    history.append(_rec(START, LEAVE))

    r = compute_weekly_payroll(_profile(), history, START, END)
    assert r.excess_leave_days_count == 1
    assert summarize_month(history, 2025, 11).remaining_quota == 0

    s = summarize_month(history[:2], 2025, 11)
    assert (s.pending, s.remaining_quota) == (2, 1)


def test_status_labels():
    assert status_label(PRESENT) == "HADIR"
    assert status_label(PRESENT, True) == "TERLAMBAT"
    assert status_label(LEAVE_PENDING) == "MENUNGGU"
    assert status_label(LEAVE) == "IZIN"
    assert status_label(ABSENT) == "ABSEN"


def test_report_to_dict_uses_plain_numbers():
    d = compute_weekly_payroll(_profile(), _week(), START, END).to_dict()
    assert d["net_salary"] == 700000.0
    assert isinstance(d["gross_period_salary"], float)
    assert d["employee_name"] == "Budi"
