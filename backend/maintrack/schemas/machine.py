# maintrack/schemas/machine.py
from datetime import date, datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from maintrack.domain.constants import MachineStatusLiteral

class MachineCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    MachineCode: str = Field(min_length=1, max_length=50)
    Name: str = Field(min_length=1, max_length=200)
    Type: str = Field(min_length=1, max_length=100)
    Manufacturer: Optional[str] = None
    Model: Optional[str] = None
    SerialNumber: Optional[str] = None
    Location: str = Field(min_length=1, max_length=200)
    Department: Optional[str] = None
    Status_s: MachineStatusLiteral = "operational"
    InstallationDate: Optional[date] = None
    Notes: Optional[str] = None

# Hepsi opsiyonel; sadece gönderilen alanlar (exclude_unset) guard'a gider
class MachineUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    # Değişmez; aynı değerle gelirse yok sayılır (form yeniden gönderimi)
    MachineCode: Optional[str] = None
    Name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    Type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    Manufacturer: Optional[str] = None
    Model: Optional[str] = None
    SerialNumber: Optional[str] = None
    Location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    Department: Optional[str] = None
    Status_s: Optional[MachineStatusLiteral] = None
    InstallationDate: Optional[date] = None
    Notes: Optional[str] = None

class MachineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    MachineID: int
    MachineCode: str
    Name: str
    Type: str
    Manufacturer: Optional[str] = None
    Model: Optional[str] = None
    SerialNumber: Optional[str] = None
    Location: str
    Department: Optional[str] = None
    Status_s: MachineStatusLiteral
    InstallationDate: Optional[date] = None
    Notes: Optional[str] = None
    CreatedAt: datetime
    UpdatedAt: datetime
    Version: int

class MachineBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    MachineID: int
    MachineCode: str
    Name: str
    Location: str
    Status_s: MachineStatusLiteral

class HistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    HistoryID: int
    MachineID: int
    ChangeType: str
    ChangeDescription: str
    OldValues: Optional[Dict[str, Any]] = None
    NewValues: Optional[Dict[str, Any]] = None
    ChangedBy: int
    CreatedAt: datetime
