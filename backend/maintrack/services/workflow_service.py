# backend/maintrack/services/workflow_service.py
"""
Bakım kaydı iş akışı: start / complete / cancel.

Her geçiş; işlemi yapan teknisyen, sunucu zamanı, önceki ve yeni durum ile
eylem adını (start_work | complete_work | cancel_work) çağırana döndürür.
Tamamlanan kayıt bir plana bağlıysa planın vadesi aynı işlemde bir aralık
ileri alınır.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_now
from maintrack.domain.constants import RECORD_STATUSES, STATUS_COMPLETED
from maintrack.domain.errors import InvalidTransition, NotFound, ValidationError
from maintrack.domain.workflow import (
    EVENT_CANCEL,
    EVENT_COMPLETE,
    EVENT_START,
    event_for,
    resolve,
)
from maintrack.models import AppUser, MaintenanceRecord
from maintrack.services.schedule_service import advance_after_completion
from maintrack.services.store import get_or_404, lock_for_update, write_scope

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    record: MaintenanceRecord
    previous_status: str
    new_status: str
    action: Optional[str]
    technician_id: int
    timestamp: datetime
    next_maintenance_date: Optional[date] = None

    @property
    def changed(self) -> bool:
        return self.previous_status != self.new_status

    def metadata(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {
            "previousStatus": self.previous_status,
            "newStatus": self.new_status,
            "action": self.action,
            "technicianId": self.technician_id,
            "timestamp": self.timestamp,
            "changed": self.changed,
        }
        if self.next_maintenance_date is not None:
            meta["nextMaintenanceDate"] = self.next_maintenance_date
        return meta


def _apply(
    db: Session,
    record_id: int,
    event: str,
    technician_id: int,
    now: Optional[datetime],
) -> TransitionResult:
    ts = resolve_now(now)
    next_date = None
    with write_scope(db, f"Maintenance record {event}"):
        get_or_404(db, AppUser, technician_id, "Technician")
        record = lock_for_update(db, MaintenanceRecord, record_id)
        if record is None:
            raise NotFound("Record", record_id)

        transition = resolve(record.Status_s, event)
        previous = record.Status_s
        record.Status_s = transition.target
        record.UpdatedAt = ts
        if transition.target == STATUS_COMPLETED:
            # CreatedAt <= CompletedAt <= now; saat geride ise tamamlama reddedilir
            if record.CreatedAt is not None and ts < record.CreatedAt:
                raise ValidationError(
                    "Completion time precedes record creation",
                    meta={"createdAt": record.CreatedAt, "now": ts},
                )
            record.CompletedAt = ts
            if record.ScheduleID is not None:
                schedule = advance_after_completion(db, record.ScheduleID, now=ts)
                if schedule is not None:
                    next_date = schedule.NextMaintenanceDate
        db.flush()

    logger.info(
        "record %s %s -> %s (%s by technician %s)",
        record_id, previous, transition.target, transition.action, technician_id,
    )
    return TransitionResult(
        record=record,
        previous_status=previous,
        new_status=transition.target,
        action=transition.action,
        technician_id=technician_id,
        timestamp=ts,
        next_maintenance_date=next_date,
    )


def start_work(db: Session, record_id: int, technician_id: int, *, now: Optional[datetime] = None) -> TransitionResult:
    return _apply(db, record_id, EVENT_START, technician_id, now)


def complete_work(db: Session, record_id: int, technician_id: int, *, now: Optional[datetime] = None) -> TransitionResult:
    return _apply(db, record_id, EVENT_COMPLETE, technician_id, now)


def cancel_work(db: Session, record_id: int, technician_id: int, *, now: Optional[datetime] = None) -> TransitionResult:
    return _apply(db, record_id, EVENT_CANCEL, technician_id, now)


def set_status(
    db: Session,
    record_id: int,
    status_s: str,
    technician_id: int,
    *,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Genel durum yazımı da geçiş tablosundan geçer; tabloyu atlayan
    doğrudan yazma yok. Aynı duruma istek değişiklik yapmadan döner.
    """
    if status_s not in RECORD_STATUSES:
        raise ValidationError(f"Unknown status {status_s!r}", meta={"status": status_s})

    record = get_or_404(db, MaintenanceRecord, record_id, "Record")
    current = record.Status_s
    if current == status_s:
        return TransitionResult(
            record=record,
            previous_status=current,
            new_status=current,
            action=None,
            technician_id=technician_id,
            timestamp=resolve_now(now),
        )

    event = event_for(current, status_s)
    if event is None:
        raise InvalidTransition(current, status_s)
    return _apply(db, record_id, event, technician_id, now)
