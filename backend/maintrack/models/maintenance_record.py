from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text, JSON, Numeric, ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from ..core.db import Base

class MaintenanceRecord(Base):
    __tablename__ = "MaintenanceRecord"

    RecordID        = Column(Integer, primary_key=True, autoincrement=True)
    RecordCode      = Column(String(50), nullable=False, unique=True)
    MachineID       = Column(Integer, ForeignKey("Machine.MachineID"), nullable=False, index=True)
    ScheduleID      = Column(Integer, ForeignKey("MaintenanceSchedule.ScheduleID"), index=True)
    MaintenanceDate = Column(Date, nullable=False, index=True)
    Type            = Column(String(100), nullable=False)
    # Oluştururken bir kez atanır, sonra değişmez
    TechnicianID    = Column(Integer, ForeignKey("AppUser.UserID"), nullable=False, index=True)
    WorkDescription = Column(Text, nullable=False)
    PartsUsed       = Column(JSON)
    Cost            = Column(Numeric(10, 2))
    Duration        = Column(Integer)   # dakika
    Status_s        = Column(String(20), nullable=False, server_default="pending")
    Notes           = Column(Text)
    WorkImages      = Column(JSON)
    CompletedAt     = Column(DateTime)
    CreatedAt       = Column(DateTime, nullable=False, server_default=func.now())
    UpdatedAt       = Column(DateTime, nullable=False, server_default=func.now())
    Version         = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "Status_s in ('pending','in_progress','completed','cancelled')",
            name="CK_Record_Status",
        ),
        CheckConstraint("Cost IS NULL OR Cost >= 0", name="CK_Record_Cost"),
        CheckConstraint("Duration IS NULL OR Duration >= 0", name="CK_Record_Duration"),
    )
    __mapper_args__ = {"version_id_col": Version}

    machine    = relationship("Machine", back_populates="records")
    schedule   = relationship("MaintenanceSchedule", back_populates="records")
    technician = relationship("AppUser")
