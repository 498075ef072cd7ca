# maintrack/routers/dashboard.py
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from maintrack.core.api import ok, list_meta
from maintrack.core.clock import Clock, get_clock
from maintrack.core.db import get_db
from maintrack.core.security import get_current_user
from maintrack.domain.constants import UPCOMING_DEFAULT_DAYS, UPCOMING_MAX_DAYS, UPCOMING_MIN_DAYS
from maintrack.routers.schedules import schedule_rows
from maintrack.schemas.dashboard import CalendarDay, DashboardStats
from maintrack.services import dashboard_service, schedule_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(get_current_user)])

@router.get("/stats")
def stats_ep(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    today = clock().date()
    stats = DashboardStats(**dashboard_service.get_dashboard_stats(db, today=today))
    return ok(stats.model_dump(), meta={"asOf": today})

@router.get("/upcoming-maintenance")
def upcoming_maintenance_ep(
    days: int = Query(UPCOMING_DEFAULT_DAYS, ge=UPCOMING_MIN_DAYS, le=UPCOMING_MAX_DAYS),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    today = clock().date()
    items = schedule_rows(schedule_service.list_upcoming_schedules(db, days, today=today), today)
    return ok(items, meta=list_meta(items, {"days": days}))

@router.get("/calendar/{year}/{month}")
def calendar_ep(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    rows = dashboard_service.get_calendar(db, year, month, today=clock().date())
    items = [CalendarDay(**r).model_dump() for r in rows]
    return ok(items, meta=list_meta(items, {"year": year, "month": month}))
