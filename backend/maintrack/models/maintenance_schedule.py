from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, JSON, ForeignKey, CheckConstraint, func, true
)
from sqlalchemy.orm import relationship
from ..core.db import Base

class MaintenanceSchedule(Base):
    __tablename__ = "MaintenanceSchedule"

    ScheduleID          = Column(Integer, primary_key=True, autoincrement=True)
    ScheduleCode        = Column(String(50), nullable=False, unique=True)
    MachineID           = Column(Integer, ForeignKey("Machine.MachineID"), nullable=False, index=True)
    Type                = Column(String(100), nullable=False)
    IntervalDays        = Column(Integer, nullable=False)
    StartDate           = Column(Date, nullable=False)
    # Her zaman StartDate + k * IntervalDays
    NextMaintenanceDate = Column(Date, nullable=False, index=True)
    Priority_s          = Column(String(20), nullable=False, server_default="medium")
    TaskChecklist       = Column(JSON)
    RequiredParts       = Column(JSON)
    RequiredTools       = Column(JSON)
    EstimatedDuration   = Column(Integer)   # dakika
    IsActive            = Column(Boolean, nullable=False, server_default=true())
    CreatedAt           = Column(DateTime, nullable=False, server_default=func.now())
    UpdatedAt           = Column(DateTime, nullable=False, server_default=func.now())
    Version             = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("IntervalDays > 0", name="CK_Schedule_Interval_Positive"),
        CheckConstraint("Priority_s in ('low','medium','high','critical')", name="CK_Schedule_Priority"),
        CheckConstraint("EstimatedDuration IS NULL OR EstimatedDuration >= 0", name="CK_Schedule_Duration"),
    )
    __mapper_args__ = {"version_id_col": Version}

    machine = relationship("Machine", back_populates="schedules")
    records = relationship("MaintenanceRecord", back_populates="schedule")
