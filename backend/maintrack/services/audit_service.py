# backend/maintrack/services/audit_service.py
"""
Makine geçmişi (denetim izi).

Makinedeki her gerçek değişiklikte, izlenen alanların eski/yeni değerleri
ve işlemi yapan kullanıcı ile bir MachineHistory satırı yazılır. Satırlar
sadece eklenir.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_now
from maintrack.domain.constants import (
    CHANGE_CREATED,
    CHANGE_LOCATION,
    CHANGE_STATUS,
    CHANGE_UPDATED,
)
from maintrack.domain.errors import EngineError
from maintrack.models import Machine, MachineHistory
from maintrack.services.store import get_or_404, read_scope, write_scope

logger = logging.getLogger(__name__)

# Geçmişe yazılan alanlar ve okunur etiketleri
AUDITED_FIELDS: Dict[str, str] = {
    "Location": "Location",
    "Status_s": "Status",
    "Name": "Name",
    "Type": "Type",
    "Department": "Department",
}


def _jsonable(v: Any) -> Any:
    if isinstance(v, (date, datetime)):
        return v.isoformat()
    if isinstance(v, Decimal):
        return str(v)
    return v


def audited_changes(changes: Mapping[str, Tuple[Any, Any]]) -> Dict[str, Tuple[Any, Any]]:
    return {k: v for k, v in changes.items() if k in AUDITED_FIELDS}


def change_type_for(changes: Mapping[str, Tuple[Any, Any]]) -> str:
    keys = set(changes)
    if keys == {"Location"}:
        return CHANGE_LOCATION
    if keys == {"Status_s"}:
        return CHANGE_STATUS
    return CHANGE_UPDATED


def describe(changes: Mapping[str, Tuple[Any, Any]]) -> str:
    parts = [
        f"{AUDITED_FIELDS[k]}: {old if old is not None else '-'} → {new if new is not None else '-'}"
        for k, (old, new) in changes.items()
    ]
    return "Machine updated: " + ", ".join(parts)


def build_entry(
    machine_id: int,
    changes: Mapping[str, Tuple[Any, Any]],
    changed_by: int,
    now: datetime,
) -> Optional[MachineHistory]:
    tracked = audited_changes(changes)
    if not tracked:
        return None
    return MachineHistory(
        MachineID=machine_id,
        ChangeType=change_type_for(tracked),
        ChangeDescription=describe(tracked),
        OldValues={k: _jsonable(old) for k, (old, _new) in tracked.items()},
        NewValues={k: _jsonable(new) for k, (_old, new) in tracked.items()},
        ChangedBy=changed_by,
        CreatedAt=now,
    )


def record_machine_update(
    db: Session,
    *,
    machine_id: int,
    changes: Mapping[str, Tuple[Any, Any]],
    changed_by: Optional[int],
    now: Optional[datetime] = None,
) -> Optional[MachineHistory]:
    """
    Güncelleme commit edildikten sonra çağrılır; denetim yazımı best-effort.
    Yazılamazsa loglanır, makine güncellemesi geri alınmaz.
    """
    if changed_by is None:
        return None
    entry = build_entry(machine_id, changes, changed_by, resolve_now(now))
    if entry is None:
        return None
    try:
        with write_scope(db, "Machine history creation"):
            db.add(entry)
    except EngineError:
        logger.exception("audit entry for machine %s could not be written", machine_id)
        return None
    return entry


def record_machine_created(db: Session, machine: Machine, changed_by: int, now: datetime) -> MachineHistory:
    entry = MachineHistory(
        MachineID=machine.MachineID,
        ChangeType=CHANGE_CREATED,
        ChangeDescription=f"Machine registered: {machine.MachineCode} ({machine.Name})",
        OldValues=None,
        NewValues={k: _jsonable(getattr(machine, k)) for k in AUDITED_FIELDS},
        ChangedBy=changed_by,
        CreatedAt=now,
    )
    db.add(entry)
    return entry


def get_machine_history(db: Session, machine_id: int) -> List[MachineHistory]:
    get_or_404(db, Machine, machine_id)
    with read_scope("Machine history query"):
        return (
            db.query(MachineHistory)
            .filter(MachineHistory.MachineID == machine_id)
            .order_by(MachineHistory.CreatedAt.desc(), MachineHistory.HistoryID.desc())
            .all()
        )

