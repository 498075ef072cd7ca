# backend/maintrack/services/dashboard_service.py
"""
Pano sayaçları ve aylık takvim.

Önbellek yok: her çağrı güncel durumdan yeniden hesaplanır.
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, true
from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_today
from maintrack.domain.constants import PENDING_WINDOW_DAYS, STATUS_COMPLETED
from maintrack.domain.errors import ValidationError
from maintrack.models import Machine, MaintenanceRecord, MaintenanceSchedule
from maintrack.services.store import read_scope


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12", meta={"month": month})
    if not 1 <= year <= 9999:
        raise ValidationError("year out of range", meta={"year": year})
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def get_dashboard_stats(db: Session, *, today: Optional[date] = None) -> Dict[str, int]:
    day = resolve_today(today)
    first, last = month_bounds(day.year, day.month)
    window_end = day + timedelta(days=PENDING_WINDOW_DAYS)
    active = MaintenanceSchedule.IsActive == true()

    with read_scope("Dashboard stats"):
        total_machines = db.query(func.count(Machine.MachineID)).scalar()
        pending = (
            db.query(func.count(MaintenanceSchedule.ScheduleID))
            .filter(
                active,
                MaintenanceSchedule.NextMaintenanceDate >= day,
                MaintenanceSchedule.NextMaintenanceDate <= window_end,
            )
            .scalar()
        )
        completed = (
            db.query(func.count(MaintenanceRecord.RecordID))
            .filter(
                MaintenanceRecord.Status_s == STATUS_COMPLETED,
                MaintenanceRecord.MaintenanceDate >= first,
                MaintenanceRecord.MaintenanceDate <= last,
            )
            .scalar()
        )
        overdue = (
            db.query(func.count(MaintenanceSchedule.ScheduleID))
            .filter(active, MaintenanceSchedule.NextMaintenanceDate < day)
            .scalar()
        )

    return {
        "totalMachines": int(total_machines or 0),
        "pendingMaintenance": int(pending or 0),
        "completedThisMonth": int(completed or 0),
        "overdue": int(overdue or 0),
    }


def get_calendar(
    db: Session,
    year: int,
    month: int,
    *,
    today: Optional[date] = None,
) -> List[Dict[str, object]]:
    """Aydaki aktif planlar vade gününe göre gruplanır; gün < bugün ise 'overdue'."""
    first, last = month_bounds(year, month)
    day = resolve_today(today)

    with read_scope("Calendar query"):
        rows = (
            db.query(
                MaintenanceSchedule.NextMaintenanceDate.label("date"),
                func.count(MaintenanceSchedule.ScheduleID).label("maintenanceCount"),
            )
            .filter(
                MaintenanceSchedule.IsActive == true(),
                MaintenanceSchedule.NextMaintenanceDate >= first,
                MaintenanceSchedule.NextMaintenanceDate <= last,
            )
            .group_by(MaintenanceSchedule.NextMaintenanceDate)
            .order_by(MaintenanceSchedule.NextMaintenanceDate.asc())
            .all()
        )

    return [
        {
            "date": r.date,
            "maintenanceCount": int(r.maintenanceCount),
            "status": "overdue" if r.date < day else "pending",
        }
        for r in rows
    ]
