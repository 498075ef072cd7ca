# maintrack/routers/records.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from maintrack.core.api import ok, update_meta
from maintrack.core.clock import Clock, get_clock
from maintrack.core.db import get_db
from maintrack.core.security import get_current_user, require_roles
from maintrack.domain.constants import WORK_ROLES, WRITE_ROLES
from maintrack.models import AppUser
from maintrack.schemas.record import RecordCreate, RecordOut, RecordUpdate, StatusIn
from maintrack.services import record_service, workflow_service

router = APIRouter(prefix="/records", tags=["records"], dependencies=[Depends(get_current_user)])
Worker = require_roles(*WORK_ROLES)
Writer = require_roles(*WRITE_ROLES)

def _out(r) -> dict:
    return RecordOut.model_validate(r).model_dump()

def _transition(result) -> object:
    return ok(_out(result.record), meta=result.metadata())

@router.post("", status_code=201)
def create_record_ep(
    payload: RecordCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Worker),
):
    data = payload.model_dump(exclude_none=True)
    data.setdefault("TechnicianID", current.UserID)
    r = record_service.create_record(db, data, now=clock())
    return ok(_out(r), status_code=201)

@router.get("/mine")
def my_records_ep(db: Session = Depends(get_db), current: AppUser = Depends(get_current_user)):
    items = [_out(r) for r in record_service.list_records_by_technician(db, current.UserID)]
    return ok(items, meta={"count": len(items)})

@router.get("/{record_id}")
def get_record_ep(record_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return ok(_out(record_service.get_record(db, record_id)))

@router.put("/{record_id}")
def update_record_ep(
    payload: RecordUpdate,
    record_id: int = Path(..., ge=1),
    expectedVersion: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: AppUser = Depends(Worker),
):
    result = record_service.update_record(
        db, record_id, payload.model_dump(exclude_unset=True),
        now=clock(), expected_version=expectedVersion,
    )
    return ok(_out(result.entity), meta=update_meta(result))

@router.delete("/{record_id}")
def delete_record_ep(
    record_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _: AppUser = Depends(Writer),
):
    record_service.delete_record(db, record_id)
    return ok({"RecordID": record_id, "deleted": True})

# ---- İş akışı ----
@router.post("/{record_id}/start")
def start_work_ep(
    record_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Worker),
):
    return _transition(workflow_service.start_work(db, record_id, current.UserID, now=clock()))

@router.post("/{record_id}/complete")
def complete_work_ep(
    record_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Worker),
):
    return _transition(workflow_service.complete_work(db, record_id, current.UserID, now=clock()))

@router.post("/{record_id}/cancel")
def cancel_work_ep(
    record_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Worker),
):
    return _transition(workflow_service.cancel_work(db, record_id, current.UserID, now=clock()))

@router.patch("/{record_id}/status")
def set_status_ep(
    body: StatusIn,
    record_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current: AppUser = Depends(Worker),
):
    return _transition(
        workflow_service.set_status(db, record_id, body.status, current.UserID, now=clock())
    )
