from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from ..core.db import Base

# Sadece eklenir; uygulama güncellemez / silmez (makineyle birlikte gider)
class MachineHistory(Base):
    __tablename__ = "MachineHistory"

    HistoryID         = Column(Integer, primary_key=True, autoincrement=True)
    MachineID         = Column(Integer, ForeignKey("Machine.MachineID", ondelete="CASCADE"), nullable=False, index=True)
    ChangeType        = Column(String(30), nullable=False)
    ChangeDescription = Column(Text, nullable=False)
    OldValues         = Column(JSON)   # {"Location": "A-1", ...}
    NewValues         = Column(JSON)   # {"Location": "B-2", ...}
    ChangedBy         = Column(Integer, ForeignKey("AppUser.UserID"), nullable=False)
    CreatedAt         = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "ChangeType in ('created','updated','location_changed','status_changed')",
            name="CK_History_ChangeType",
        ),
    )

    machine         = relationship("Machine", back_populates="history")
    changed_by_user = relationship("AppUser")
