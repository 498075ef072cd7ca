# backend/maintrack/services/record_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_now
from maintrack.domain.constants import RECORD_STATUSES, STATUS_PENDING
from maintrack.domain.errors import ConflictError, ValidationError
from maintrack.models import AppUser, Machine, MaintenanceRecord, MaintenanceSchedule
from maintrack.services.store import get_or_404, read_scope, write_scope
from maintrack.services.update_guard import (
    FrozenField,
    TrackedField,
    UpdateResult,
    as_date,
    as_datetime,
    as_money,
    as_non_negative_int,
    as_positive_int,
    as_str_list,
    guarded_update,
    money_eq,
    normalize,
    one_of,
)

logger = logging.getLogger(__name__)

# Referans alanları ve durum bu listede yok: durum sadece iş akışıyla değişir
RECORD_FIELDS = (
    TrackedField("MaintenanceDate", coerce=as_date, nullable=False),
    TrackedField("Type", nullable=False),
    TrackedField("WorkDescription", nullable=False),
    TrackedField("PartsUsed", coerce=as_str_list),
    TrackedField("Cost", coerce=as_money, equals=money_eq),
    TrackedField("Duration", coerce=as_non_negative_int),
    TrackedField("Notes"),
    TrackedField("WorkImages", coerce=as_str_list),
)
_CREATE_FIELDS = (
    TrackedField("RecordCode", nullable=False),
    TrackedField("MachineID", coerce=as_positive_int, nullable=False),
    TrackedField("ScheduleID", coerce=as_positive_int),
    TrackedField("TechnicianID", coerce=as_positive_int, nullable=False),
) + RECORD_FIELDS
_REQUIRED = ("RecordCode", "MachineID", "TechnicianID", "MaintenanceDate", "Type", "WorkDescription")
_WORKFLOW = "Status changes go through start/complete/cancel"
_FROZEN = (
    FrozenField("RecordCode", nullable=False),
    FrozenField("MachineID", coerce=as_positive_int, nullable=False),
    FrozenField("ScheduleID", coerce=as_positive_int),
    FrozenField("TechnicianID", coerce=as_positive_int, nullable=False),
    FrozenField("Status_s", coerce=one_of(RECORD_STATUSES), nullable=False, reason=_WORKFLOW),
    FrozenField("CompletedAt", coerce=as_datetime, reason=_WORKFLOW),
)


# -------- Okuma --------
def get_record(db: Session, record_id: int) -> MaintenanceRecord:
    return get_or_404(db, MaintenanceRecord, record_id, "Record")

def list_records_by_machine(db: Session, machine_id: int) -> List[MaintenanceRecord]:
    get_or_404(db, Machine, machine_id)
    with read_scope("Record list by machine"):
        return (
            db.query(MaintenanceRecord)
            .filter(MaintenanceRecord.MachineID == machine_id)
            .order_by(MaintenanceRecord.MaintenanceDate.desc(), MaintenanceRecord.RecordID.desc())
            .all()
        )

def list_records_by_technician(db: Session, technician_id: int) -> List[MaintenanceRecord]:
    with read_scope("Record list by technician"):
        return (
            db.query(MaintenanceRecord)
            .filter(MaintenanceRecord.TechnicianID == technician_id)
            .order_by(MaintenanceRecord.MaintenanceDate.desc(), MaintenanceRecord.RecordID.desc())
            .all()
        )


# -------- Yazma --------
def create_record(
    db: Session,
    data: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
) -> MaintenanceRecord:
    """Kayıt her zaman 'pending' durumunda açılır."""
    payload = dict(data)
    status_s = payload.pop("Status_s", None)
    if status_s not in (None, STATUS_PENDING):
        raise ValidationError("New records start in 'pending'", meta={"field": "Status_s"})

    clean = normalize(payload, _CREATE_FIELDS)
    missing = [k for k in _REQUIRED if clean.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}", meta={"fields": missing})

    ts = resolve_now(now)
    with write_scope(db, "Maintenance record creation"):
        get_or_404(db, Machine, clean["MachineID"])
        get_or_404(db, AppUser, clean["TechnicianID"], "Technician")
        schedule_id = clean.get("ScheduleID")
        if schedule_id is not None:
            schedule = get_or_404(db, MaintenanceSchedule, schedule_id, "Schedule")
            if schedule.MachineID != clean["MachineID"]:
                raise ValidationError(
                    "Schedule belongs to a different machine",
                    meta={"ScheduleID": schedule_id, "MachineID": clean["MachineID"]},
                )
        if db.query(MaintenanceRecord.RecordID).filter(
            MaintenanceRecord.RecordCode == clean["RecordCode"]
        ).first():
            raise ConflictError(f"RecordCode {clean['RecordCode']!r} already exists")

        record = MaintenanceRecord(**clean, Status_s=STATUS_PENDING, CreatedAt=ts, UpdatedAt=ts)
        db.add(record)
        db.flush()

    logger.info("record %s created for machine %s", record.RecordID, record.MachineID)
    return record


def update_record(
    db: Session,
    record_id: int,
    fields: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> UpdateResult[MaintenanceRecord]:
    return guarded_update(
        db, MaintenanceRecord, record_id, fields,
        fields=RECORD_FIELDS,
        frozen=_FROZEN,
        operation="Maintenance record update",
        entity_name="Record",
        now=now,
        expected_version=expected_version,
    )


def delete_record(db: Session, record_id: int) -> None:
    with write_scope(db, "Maintenance record deletion"):
        record = get_or_404(db, MaintenanceRecord, record_id, "Record")
        db.delete(record)
    logger.info("record %s deleted", record_id)
