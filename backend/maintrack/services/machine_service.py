# backend/maintrack/services/machine_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_now
from maintrack.domain.constants import MACHINE_STATUSES
from maintrack.domain.errors import ConflictError, ValidationError
from maintrack.models import AppUser, Machine
from maintrack.services.audit_service import record_machine_created, record_machine_update
from maintrack.services.store import get_or_404, read_scope, write_scope
from maintrack.services.update_guard import (
    FrozenField,
    TrackedField,
    UpdateResult,
    as_date,
    guarded_update,
    normalize,
    one_of,
)

logger = logging.getLogger(__name__)

# Güncellenebilir alanlar (MachineCode değişmez)
MACHINE_FIELDS = (
    TrackedField("Name", nullable=False),
    TrackedField("Type", nullable=False),
    TrackedField("Manufacturer"),
    TrackedField("Model"),
    TrackedField("SerialNumber"),
    TrackedField("Location", nullable=False),
    TrackedField("Department"),
    TrackedField("Status_s", coerce=one_of(MACHINE_STATUSES), nullable=False),
    TrackedField("InstallationDate", coerce=as_date),
    TrackedField("Notes"),
)
_FROZEN = (FrozenField("MachineCode", nullable=False),)
_CREATE_FIELDS = (TrackedField("MachineCode", nullable=False),) + MACHINE_FIELDS
_REQUIRED = ("MachineCode", "Name", "Type", "Location")


# -------- Okuma --------
def get_machine(db: Session, machine_id: int) -> Machine:
    return get_or_404(db, Machine, machine_id)

def get_machine_by_code(db: Session, code: str) -> Optional[Machine]:
    with read_scope("Machine lookup"):
        return db.query(Machine).filter(Machine.MachineCode == code).one_or_none()

def list_machines(db: Session) -> List[Machine]:
    with read_scope("Machine list"):
        return db.query(Machine).order_by(Machine.Name.asc(), Machine.MachineID.asc()).all()


# -------- Yazma --------
def create_machine(
    db: Session,
    data: Mapping[str, Any],
    *,
    changed_by: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Machine:
    clean = normalize(data, _CREATE_FIELDS)
    missing = [k for k in _REQUIRED if not clean.get(k)]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}", meta={"fields": missing})
    clean.setdefault("Status_s", "operational")

    ts = resolve_now(now)
    with write_scope(db, "Machine creation"):
        if changed_by is not None:
            get_or_404(db, AppUser, changed_by, "User")
        if db.query(Machine.MachineID).filter(Machine.MachineCode == clean["MachineCode"]).first():
            raise ConflictError(f"MachineCode {clean['MachineCode']!r} already exists")

        machine = Machine(**clean, CreatedAt=ts, UpdatedAt=ts)
        db.add(machine)
        db.flush()
        if changed_by is not None:
            record_machine_created(db, machine, changed_by, ts)

    logger.info("machine %s created (%s)", machine.MachineID, machine.MachineCode)
    return machine


def update_machine(
    db: Session,
    machine_id: int,
    fields: Mapping[str, Any],
    *,
    changed_by: Optional[int] = None,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> UpdateResult[Machine]:
    """Değişiklik yoksa yazma da geçmiş kaydı da yok."""
    ts = resolve_now(now)
    result = guarded_update(
        db, Machine, machine_id, fields,
        fields=MACHINE_FIELDS,
        frozen=_FROZEN,
        operation="Machine update",
        now=ts,
        expected_version=expected_version,
    )
    if result.changed:
        record_machine_update(
            db,
            machine_id=machine_id,
            changes=result.changes,
            changed_by=changed_by,
            now=ts,
        )
    return result


def delete_machine(db: Session, machine_id: int) -> None:
    """Planlar, kayıtlar ve geçmiş satırları makineyle birlikte silinir."""
    with write_scope(db, "Machine deletion"):
        machine = get_or_404(db, Machine, machine_id)
        db.delete(machine)
    logger.info("machine %s deleted", machine_id)
