# backend/maintrack/services/schedule_service.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, List, Mapping, Optional

from sqlalchemy import true
from sqlalchemy.orm import Session, joinedload

from maintrack.core.clock import resolve_now, resolve_today
from maintrack.domain.constants import (
    PRIORITIES,
    UPCOMING_DEFAULT_DAYS,
    UPCOMING_MAX_DAYS,
    UPCOMING_MIN_DAYS,
)
from maintrack.domain.errors import ConflictError, ValidationError
from maintrack.domain.scheduling import advance, first_due_on_or_after, is_on_grid
from maintrack.models import Machine, MaintenanceSchedule
from maintrack.services.store import get_or_404, lock_for_update, read_scope, write_scope
from maintrack.services.update_guard import (
    Changes,
    FrozenField,
    TrackedField,
    UpdateResult,
    as_bool,
    as_date,
    as_non_negative_int,
    as_positive_int,
    as_str_list,
    guarded_update,
    normalize,
    one_of,
)

logger = logging.getLogger(__name__)

# ScheduleCode / MachineID değişmez; NextMaintenanceDate elle yazılmaz
SCHEDULE_FIELDS = (
    TrackedField("Type", nullable=False),
    TrackedField("IntervalDays", coerce=as_positive_int, nullable=False),
    TrackedField("StartDate", coerce=as_date, nullable=False),
    TrackedField("Priority_s", coerce=one_of(PRIORITIES), nullable=False),
    TrackedField("TaskChecklist", coerce=as_str_list),
    TrackedField("RequiredParts", coerce=as_str_list),
    TrackedField("RequiredTools", coerce=as_str_list),
    TrackedField("EstimatedDuration", coerce=as_non_negative_int),
    TrackedField("IsActive", coerce=as_bool, nullable=False),
)
_CREATE_FIELDS = (
    TrackedField("ScheduleCode", nullable=False),
    TrackedField("MachineID", coerce=as_positive_int, nullable=False),
    TrackedField("NextMaintenanceDate", coerce=as_date),
) + SCHEDULE_FIELDS
_REQUIRED = ("ScheduleCode", "MachineID", "Type", "IntervalDays", "StartDate")
_FROZEN = (
    FrozenField("ScheduleCode", nullable=False),
    FrozenField("MachineID", coerce=as_positive_int, nullable=False),
    FrozenField(
        "NextMaintenanceDate", coerce=as_date, nullable=False,
        reason="NextMaintenanceDate follows StartDate and IntervalDays",
    ),
)


def _active_with_machine(db: Session):
    return (
        db.query(MaintenanceSchedule)
        .options(joinedload(MaintenanceSchedule.machine))
        .filter(MaintenanceSchedule.IsActive == true())
    )


# -------- Okuma --------
def get_schedule(db: Session, schedule_id: int) -> MaintenanceSchedule:
    return get_or_404(db, MaintenanceSchedule, schedule_id, "Schedule")

def list_schedules(db: Session, *, active_only: bool = True) -> List[MaintenanceSchedule]:
    with read_scope("Schedule list"):
        q = db.query(MaintenanceSchedule).options(joinedload(MaintenanceSchedule.machine))
        if active_only:
            q = q.filter(MaintenanceSchedule.IsActive == true())
        return q.order_by(MaintenanceSchedule.NextMaintenanceDate.asc(), MaintenanceSchedule.ScheduleID.asc()).all()

def list_upcoming_schedules(
    db: Session,
    horizon_days: int = UPCOMING_DEFAULT_DAYS,
    *,
    today: Optional[date] = None,
) -> List[MaintenanceSchedule]:
    """Vadesi [bugün, bugün + horizon] aralığındaki aktif planlar, vadeye göre artan."""
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) \
            or not UPCOMING_MIN_DAYS <= horizon_days <= UPCOMING_MAX_DAYS:
        raise ValidationError(
            f"days must be between {UPCOMING_MIN_DAYS} and {UPCOMING_MAX_DAYS}",
            meta={"days": horizon_days},
        )
    day = resolve_today(today)
    until = day + timedelta(days=horizon_days)
    with read_scope("Upcoming schedule query"):
        return (
            _active_with_machine(db)
            .filter(
                MaintenanceSchedule.NextMaintenanceDate >= day,
                MaintenanceSchedule.NextMaintenanceDate <= until,
            )
            .order_by(MaintenanceSchedule.NextMaintenanceDate.asc(), MaintenanceSchedule.ScheduleID.asc())
            .all()
        )

def list_overdue_schedules(db: Session, *, today: Optional[date] = None) -> List[MaintenanceSchedule]:
    day = resolve_today(today)
    with read_scope("Overdue schedule query"):
        return (
            _active_with_machine(db)
            .filter(MaintenanceSchedule.NextMaintenanceDate < day)
            .order_by(MaintenanceSchedule.NextMaintenanceDate.asc(), MaintenanceSchedule.ScheduleID.asc())
            .all()
        )


# -------- Yazma --------
def create_schedule(
    db: Session,
    data: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
) -> MaintenanceSchedule:
    clean = normalize(data, _CREATE_FIELDS)
    missing = [k for k in _REQUIRED if clean.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}", meta={"fields": missing})

    start, interval = clean["StartDate"], clean["IntervalDays"]
    next_date = clean.get("NextMaintenanceDate")
    if next_date is None:
        clean["NextMaintenanceDate"] = start
    elif not is_on_grid(start, interval, next_date):
        raise ValidationError(
            "NextMaintenanceDate must be StartDate + k * IntervalDays",
            meta={"field": "NextMaintenanceDate"},
        )
    clean.setdefault("Priority_s", "medium")
    clean.setdefault("IsActive", True)

    ts = resolve_now(now)
    with write_scope(db, "Maintenance schedule creation"):
        get_or_404(db, Machine, clean["MachineID"])
        if db.query(MaintenanceSchedule.ScheduleID).filter(
            MaintenanceSchedule.ScheduleCode == clean["ScheduleCode"]
        ).first():
            raise ConflictError(f"ScheduleCode {clean['ScheduleCode']!r} already exists")
        schedule = MaintenanceSchedule(**clean, CreatedAt=ts, UpdatedAt=ts)
        db.add(schedule)
        db.flush()

    logger.info("schedule %s created for machine %s (next %s)",
                schedule.ScheduleID, schedule.MachineID, schedule.NextMaintenanceDate)
    return schedule


def _realign(schedule: MaintenanceSchedule, changes: Changes) -> Changes:
    """Başlangıç ya da aralık değişince vade ızgaraya yeniden oturtulur."""
    if "StartDate" not in changes and "IntervalDays" not in changes:
        return {}
    start = changes.get("StartDate", (None, schedule.StartDate))[1]
    interval = changes.get("IntervalDays", (None, schedule.IntervalDays))[1]
    old_next = schedule.NextMaintenanceDate
    new_next = first_due_on_or_after(start, interval, old_next)
    if new_next == old_next:
        return {}
    return {"NextMaintenanceDate": (old_next, new_next)}


def update_schedule(
    db: Session,
    schedule_id: int,
    fields: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> UpdateResult[MaintenanceSchedule]:
    return guarded_update(
        db, MaintenanceSchedule, schedule_id, fields,
        fields=SCHEDULE_FIELDS,
        frozen=_FROZEN,
        operation="Maintenance schedule update",
        entity_name="Schedule",
        now=now,
        expected_version=expected_version,
        derive=_realign,
    )


def deactivate_schedule(
    db: Session,
    schedule_id: int,
    *,
    now: Optional[datetime] = None,
) -> UpdateResult[MaintenanceSchedule]:
    # Silmek yerine pasifleştir: geçmiş kayıtlarla bağ kopmasın
    return update_schedule(db, schedule_id, {"IsActive": False}, now=now)


def advance_after_completion(
    db: Session,
    schedule_id: int,
    *,
    now: datetime,
) -> Optional[MaintenanceSchedule]:
    """
    Bağlı kayıt tamamlandığında çağrılır (açık işlemin içinde, commit çağıranda).
    Vade, önceki vadeden bir aralık ileri alınır; bugünden değil.
    """
    schedule = lock_for_update(db, MaintenanceSchedule, schedule_id)
    if schedule is None or not schedule.IsActive:
        return None
    previous = schedule.NextMaintenanceDate
    schedule.NextMaintenanceDate = advance(previous, schedule.IntervalDays)
    schedule.UpdatedAt = now
    logger.info("schedule %s advanced %s -> %s", schedule_id, previous, schedule.NextMaintenanceDate)
    return schedule
