import os
from datetime import date
from decimal import Decimal

import pytest

from absensi_api import create_app
from absensi_api.extensions import db
from absensi_api.models.attendance import AttendanceRecord
from absensi_api.models.employee import Employee


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app(test_config={"TESTING": True})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def session(app):
    yield db.session


@pytest.fixture
def make_employee(session):
    def _make(username="budi", name="Budi Laundry", gapok=3_000_000, meal=0, method="DAILY_30", **kw):
        e = Employee(
            username=username,
            name=name,
            is_active=kw.pop("is_active", True),
            base_monthly_salary=Decimal(gapok),
            monthly_meal_allowance=Decimal(meal),
            payroll_method=method,
            cash_advance_balance=Decimal(kw.pop("kasbon", 0)),
            **kw,
        )
        session.add(e)
        session.commit()
        return e
    return _make


@pytest.fixture
def add_record(session):
    def _add(employee, day: date, status="PRESENT", is_late=False, **kw):
        r = AttendanceRecord(employee_id=employee.id, date=day, status=status, is_late=is_late, **kw)
        session.add(r)
        session.commit()
        return r
    return _add
