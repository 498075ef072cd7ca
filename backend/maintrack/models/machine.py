from sqlalchemy import Column, Integer, String, Date, DateTime, Text, CheckConstraint, func
from sqlalchemy.orm import relationship
from ..core.db import Base

class Machine(Base):
    __tablename__ = "Machine"

    MachineID        = Column(Integer, primary_key=True, autoincrement=True)
    MachineCode      = Column(String(50),  nullable=False, unique=True)   # iş kimliği, değişmez
    Name             = Column(String(200), nullable=False)
    Type             = Column(String(100), nullable=False)
    Manufacturer     = Column(String(200))
    Model            = Column(String(200))
    SerialNumber     = Column(String(100))
    Location         = Column(String(200), nullable=False)
    Department       = Column(String(200))
    Status_s         = Column(String(20),  nullable=False, server_default="operational")
    InstallationDate = Column(Date)
    Notes            = Column(Text)
    CreatedAt        = Column(DateTime, nullable=False, server_default=func.now())
    UpdatedAt        = Column(DateTime, nullable=False, server_default=func.now())
    Version          = Column(Integer,  nullable=False)

    __table_args__ = (
        CheckConstraint("Status_s in ('operational','maintenance','down')", name="CK_Machine_Status"),
    )
    __mapper_args__ = {"version_id_col": Version}

    # 1 makine -> N plan / N kayıt / N geçmiş satırı (makine silinince hepsi gider)
    schedules = relationship(
        "MaintenanceSchedule",
        back_populates="machine",
        cascade="all, delete-orphan",
    )
    records = relationship(
        "MaintenanceRecord",
        back_populates="machine",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "MachineHistory",
        back_populates="machine",
        cascade="all, delete-orphan",
    )
