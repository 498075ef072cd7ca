# maintrack/routers/schedules.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from maintrack.core.api import ok, list_meta, update_meta
from maintrack.core.clock import Clock, get_clock
from maintrack.core.db import get_db
from maintrack.core.security import get_current_user, require_roles
from maintrack.domain.constants import UPCOMING_DEFAULT_DAYS, UPCOMING_MAX_DAYS, UPCOMING_MIN_DAYS, WRITE_ROLES
from maintrack.domain.scheduling import classify
from maintrack.schemas.schedule import ScheduleCreate, ScheduleOut, ScheduleUpdate, ScheduleWithMachineOut
from maintrack.services import schedule_service

router = APIRouter(prefix="/schedules", tags=["schedules"], dependencies=[Depends(get_current_user)])
Writer = require_roles(*WRITE_ROLES)

def _out(s) -> dict:
    return ScheduleOut.model_validate(s).model_dump()

def schedule_rows(rows, today) -> list:
    items = []
    for s in rows:
        out = ScheduleWithMachineOut.model_validate(s)
        out.state = classify(s.NextMaintenanceDate, today)
        items.append(out.model_dump())
    return items

# ---- Statik yollar {schedule_id}'den önce ----
@router.get("/upcoming")
def upcoming_ep(
    days: int = Query(UPCOMING_DEFAULT_DAYS, ge=UPCOMING_MIN_DAYS, le=UPCOMING_MAX_DAYS),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    today = clock().date()
    items = schedule_rows(schedule_service.list_upcoming_schedules(db, days, today=today), today)
    return ok(items, meta=list_meta(items, {"days": days, "today": today}))

@router.get("/overdue")
def overdue_ep(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    today = clock().date()
    items = schedule_rows(schedule_service.list_overdue_schedules(db, today=today), today)
    return ok(items, meta=list_meta(items, {"today": today}))

@router.get("")
def list_schedules_ep(
    activeOnly: bool = Query(True),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    items = schedule_rows(schedule_service.list_schedules(db, active_only=activeOnly), clock().date())
    return ok(items, meta=list_meta(items))

@router.post("", status_code=201)
def create_schedule_ep(
    payload: ScheduleCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: object = Depends(Writer),
):
    s = schedule_service.create_schedule(db, payload.model_dump(exclude_none=True), now=clock())
    return ok(_out(s), status_code=201)

@router.get("/{schedule_id}")
def get_schedule_ep(
    schedule_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    s = schedule_service.get_schedule(db, schedule_id)
    return ok(schedule_rows([s], clock().date())[0])

@router.put("/{schedule_id}")
def update_schedule_ep(
    payload: ScheduleUpdate,
    schedule_id: int = Path(..., ge=1),
    expectedVersion: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: object = Depends(Writer),
):
    result = schedule_service.update_schedule(
        db, schedule_id, payload.model_dump(exclude_unset=True),
        now=clock(), expected_version=expectedVersion,
    )
    return ok(_out(result.entity), meta=update_meta(result))

@router.post("/{schedule_id}/deactivate")
def deactivate_schedule_ep(
    schedule_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: object = Depends(Writer),
):
    result = schedule_service.deactivate_schedule(db, schedule_id, now=clock())
    return ok(_out(result.entity), meta=update_meta(result))
