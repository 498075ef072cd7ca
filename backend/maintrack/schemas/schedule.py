# maintrack/schemas/schedule.py
from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from maintrack.domain.constants import PriorityLiteral
from .machine import MachineBrief

class ScheduleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    ScheduleCode: str = Field(min_length=1, max_length=50)
    MachineID: int = Field(ge=1)
    Type: str = Field(min_length=1, max_length=100)
    IntervalDays: int = Field(gt=0)
    StartDate: date
    NextMaintenanceDate: Optional[date] = None
    Priority_s: PriorityLiteral = "medium"
    TaskChecklist: Optional[List[str]] = None
    RequiredParts: Optional[List[str]] = None
    RequiredTools: Optional[List[str]] = None
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)
    IsActive: bool = True

class ScheduleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    # Değişmez alanlar: aynı değerle gelirse yok sayılır
    ScheduleCode: Optional[str] = None
    MachineID: Optional[int] = None
    NextMaintenanceDate: Optional[date] = None
    Type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    IntervalDays: Optional[int] = Field(default=None, gt=0)
    StartDate: Optional[date] = None
    Priority_s: Optional[PriorityLiteral] = None
    TaskChecklist: Optional[List[str]] = None
    RequiredParts: Optional[List[str]] = None
    RequiredTools: Optional[List[str]] = None
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)
    IsActive: Optional[bool] = None

class ScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    ScheduleID: int
    ScheduleCode: str
    MachineID: int
    Type: str
    IntervalDays: int
    StartDate: date
    NextMaintenanceDate: date
    Priority_s: PriorityLiteral
    TaskChecklist: Optional[List[str]] = None
    RequiredParts: Optional[List[str]] = None
    RequiredTools: Optional[List[str]] = None
    EstimatedDuration: Optional[int] = None
    IsActive: bool
    CreatedAt: datetime
    UpdatedAt: datetime
    Version: int

# Liste uçları: makine özeti + bugüne göre sınıf
class ScheduleWithMachineOut(ScheduleOut):
    machine: Optional[MachineBrief] = None
    state: Optional[Literal["scheduled", "pending", "overdue"]] = None
