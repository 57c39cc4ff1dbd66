# absensi_api/services/payroll_service.py
from __future__ import annotations

from datetime import date
from typing import List, Mapping, Optional

from flask import current_app

from absensi_api.common.errors import APIError
from absensi_api.models.employee import Employee
from absensi_api.services import stores
from absensi_api.services.payroll_engine import (
    PayrollReport, PayrollSettings, compute_weekly_payroll,
)


def settings_from_config(config: Mapping) -> PayrollSettings:
    return PayrollSettings(
        free_leave_quota=int(config.get("FREE_LEAVE_QUOTA", 3)),
        days_in_month=int(config.get("PAYROLL_DAYS_IN_MONTH", 30)),
        weeks_in_month=int(config.get("PAYROLL_WEEKS_IN_MONTH", 4)),
        charge_missing_days=bool(config.get("PAYROLL_CHARGE_MISSING_DAYS", False)),
    )


def payroll_for(employee_id: int, start: date, end: date,
                settings: Optional[PayrollSettings] = None) -> PayrollReport:
    """Load one employee's profile, history and adjustments, then run the engine."""
    profile = stores.profile_for(employee_id)
    if profile is None:
        raise APIError("EMPLOYEE_NOT_FOUND", f"Employee {employee_id} not found", 404)

    bonus, manual_deduction = stores.adjustment_for(employee_id)
    return compute_weekly_payroll(
        profile,
        stores.records_for(employee_id),
        start,
        end,
        bonus=bonus,
        manual_deduction=manual_deduction,
        settings=settings or settings_from_config(current_app.config),
    )


def payroll_for_active(start: date, end: date) -> List[PayrollReport]:
    settings = settings_from_config(current_app.config)
    ids = [e.id for e in Employee.query.filter_by(is_active=True).order_by(Employee.name.asc()).all()]
    return [payroll_for(eid, start, end, settings) for eid in ids]
