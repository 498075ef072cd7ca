# maintrack/schemas/record.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from maintrack.domain.constants import RecordStatusLiteral

class RecordCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    RecordCode: str = Field(min_length=1, max_length=50)
    MachineID: int = Field(ge=1)
    ScheduleID: Optional[int] = Field(default=None, ge=1)
    TechnicianID: Optional[int] = Field(default=None, ge=1)   # boşsa işlemi yapan kullanıcı
    MaintenanceDate: date
    Type: str = Field(min_length=1, max_length=100)
    WorkDescription: str = Field(min_length=1)
    PartsUsed: Optional[List[str]] = None
    Cost: Optional[Decimal] = Field(default=None, ge=0)
    Duration: Optional[int] = Field(default=None, ge=0)
    Notes: Optional[str] = None
    WorkImages: Optional[List[str]] = None

class RecordUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    # Değişmez / iş akışı alanları: aynı değerle gelirse yok sayılır
    RecordCode: Optional[str] = None
    MachineID: Optional[int] = None
    ScheduleID: Optional[int] = None
    TechnicianID: Optional[int] = None
    Status_s: Optional[RecordStatusLiteral] = None
    CompletedAt: Optional[datetime] = None
    MaintenanceDate: Optional[date] = None
    Type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    WorkDescription: Optional[str] = Field(default=None, min_length=1)
    PartsUsed: Optional[List[str]] = None
    Cost: Optional[Decimal] = Field(default=None, ge=0)
    Duration: Optional[int] = Field(default=None, ge=0)
    Notes: Optional[str] = None
    WorkImages: Optional[List[str]] = None

class StatusIn(BaseModel):
    status: RecordStatusLiteral

class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    RecordID: int
    RecordCode: str
    MachineID: int
    ScheduleID: Optional[int] = None
    MaintenanceDate: date
    Type: str
    TechnicianID: int
    WorkDescription: str
    PartsUsed: Optional[List[str]] = None
    Cost: Optional[Decimal] = None
    Duration: Optional[int] = None
    Status_s: RecordStatusLiteral
    Notes: Optional[str] = None
    WorkImages: Optional[List[str]] = None
    CompletedAt: Optional[datetime] = None
    CreatedAt: datetime
    UpdatedAt: datetime
    Version: int

    # İstemci basit görsün diye JSON'da float
    @field_serializer("Cost")
    def _ser_cost(self, v: Optional[Decimal]):
        return float(v) if v is not None else None
