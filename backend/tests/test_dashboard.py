from datetime import date, timedelta

import pytest

from maintrack.domain.errors import ValidationError
from maintrack.services import dashboard_service, workflow_service
from tests.conftest import NOW, TODAY


def test_empty_store_returns_zero_counts(db):
    assert dashboard_service.get_dashboard_stats(db, today=TODAY) == {
        "totalMachines": 0,
        "pendingMaintenance": 0,
        "completedThisMonth": 0,
        "overdue": 0,
    }


def test_counts(db, users, make_machine, make_schedule, make_record):
    m1, m2 = make_machine(), make_machine()
    make_schedule(m1, StartDate=TODAY)                                  # pending
    make_schedule(m1, StartDate=TODAY + timedelta(days=30))             # pending (pencere sınırı)
    make_schedule(m2, StartDate=TODAY + timedelta(days=31))             # scheduled
    make_schedule(m2, StartDate=TODAY - timedelta(days=3))              # overdue
    make_schedule(m2, StartDate=TODAY - timedelta(days=3), IsActive=False)

    tech_id = users["tech"].UserID
    for when in (date(2025, 3, 1), date(2025, 3, 31), date(2025, 2, 28)):
        r = make_record(m1, MaintenanceDate=when)
        workflow_service.start_work(db, r.RecordID, tech_id, now=NOW)
        workflow_service.complete_work(db, r.RecordID, tech_id, now=NOW)
    make_record(m1, MaintenanceDate=date(2025, 3, 5))                  # pending, sayılmaz

    assert dashboard_service.get_dashboard_stats(db, today=TODAY) == {
        "totalMachines": 2,
        "pendingMaintenance": 2,
        "completedThisMonth": 2,
        "overdue": 1,
    }


def test_calendar_groups_by_due_date(db, make_machine, make_schedule):
    m = make_machine()
    make_schedule(m, StartDate=date(2025, 3, 5))
    make_schedule(m, StartDate=date(2025, 3, 5))
    make_schedule(m, StartDate=date(2025, 3, 20))
    make_schedule(m, StartDate=date(2025, 4, 1))
    make_schedule(m, StartDate=date(2025, 3, 21), IsActive=False)

    days = dashboard_service.get_calendar(db, 2025, 3, today=TODAY)
    assert days == [
        {"date": date(2025, 3, 5), "maintenanceCount": 2, "status": "overdue"},
        {"date": date(2025, 3, 20), "maintenanceCount": 1, "status": "pending"},
    ]


def test_calendar_empty_month(db):
    assert dashboard_service.get_calendar(db, 2025, 2, today=TODAY) == []


@pytest.mark.parametrize("year,month", [(2025, 0), (2025, 13), (0, 5)])
def test_calendar_rejects_bad_month(db, year, month):
    with pytest.raises(ValidationError):
        dashboard_service.get_calendar(db, year, month, today=TODAY)


def test_month_bounds_leap_year():
    assert dashboard_service.month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
