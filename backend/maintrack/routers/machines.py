# maintrack/routers/machines.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from maintrack.core.api import ok, list_meta, update_meta
from maintrack.core.clock import Clock, get_clock
from maintrack.core.db import get_db
from maintrack.core.security import get_current_user, require_roles
from maintrack.domain.constants import WRITE_ROLES
from maintrack.models import AppUser
from maintrack.schemas.machine import HistoryOut, MachineCreate, MachineOut, MachineUpdate
from maintrack.schemas.record import RecordOut
from maintrack.services import audit_service, machine_service, record_service

router = APIRouter(prefix="/machines", tags=["machines"], dependencies=[Depends(get_current_user)])
Writer = require_roles(*WRITE_ROLES)

def _out(m) -> dict:
    return MachineOut.model_validate(m).model_dump()

@router.get("")
def list_machines_ep(db: Session = Depends(get_db)):
    items = [_out(m) for m in machine_service.list_machines(db)]
    return ok(items, meta=list_meta(items))

@router.post("", status_code=201)
def create_machine_ep(
    payload: MachineCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Writer),
):
    m = machine_service.create_machine(
        db, payload.model_dump(), changed_by=current.UserID, now=clock()
    )
    return ok(_out(m), status_code=201)

@router.get("/{machine_id}")
def get_machine_ep(machine_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return ok(_out(machine_service.get_machine(db, machine_id)))

@router.put("/{machine_id}")
def update_machine_ep(
    payload: MachineUpdate,
    machine_id: int = Path(..., ge=1),
    expectedVersion: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Writer),
):
    result = machine_service.update_machine(
        db, machine_id, payload.model_dump(exclude_unset=True),
        changed_by=current.UserID, now=clock(), expected_version=expectedVersion,
    )
    return ok(_out(result.entity), meta=update_meta(result))

@router.delete("/{machine_id}")
def delete_machine_ep(
    machine_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current: AppUser = Depends(Writer),
):
    machine_service.delete_machine(db, machine_id)
    return ok({"MachineID": machine_id, "deleted": True})

@router.get("/{machine_id}/history")
def machine_history_ep(machine_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    rows = audit_service.get_machine_history(db, machine_id)
    items = [HistoryOut.model_validate(h).model_dump() for h in rows]
    return ok(items, meta=list_meta(items))

@router.get("/{machine_id}/records")
def machine_records_ep(machine_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    rows = record_service.list_records_by_machine(db, machine_id)
    items = [RecordOut.model_validate(r).model_dump() for r in rows]
    return ok(items, meta=list_meta(items))
