from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func, true
from ..core.db import Base

# Kimlik doğrulama dış katmanda; burada sadece "kim yaptı" referansı tutulur
class AppUser(Base):
    __tablename__ = "AppUser"

    UserID    = Column(Integer, primary_key=True, autoincrement=True)
    Username  = Column(String(50),  nullable=False, unique=True)
    FullName  = Column(String(100))
    Email     = Column(String(200))
    Role      = Column(String(20),  nullable=False, server_default="technician")
    IsActive  = Column(Boolean,     nullable=False, server_default=true())
    CreatedAt = Column(DateTime,    nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "Role in ('viewer','technician','manager','admin')",
            name="CK_AppUser_Role"
        ),
    )
