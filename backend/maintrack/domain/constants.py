# backend/maintrack/domain/constants.py

"""
Uygulama genelinde durum kümeleri ve planlama sabitlerinin tek kaynağı.
"""

import os
from typing import Final, Literal

# ---- Makine ----
MACHINE_STATUSES: Final = ("operational", "maintenance", "down")
MachineStatusLiteral = Literal["operational", "maintenance", "down"]

# ---- Bakım planı ----
PRIORITIES: Final = ("low", "medium", "high", "critical")
PriorityLiteral = Literal["low", "medium", "high", "critical"]

# ---- Bakım kaydı ----
STATUS_PENDING: Final[str] = "pending"
STATUS_IN_PROGRESS: Final[str] = "in_progress"
STATUS_COMPLETED: Final[str] = "completed"
STATUS_CANCELLED: Final[str] = "cancelled"
RECORD_STATUSES: Final = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)
RecordStatusLiteral = Literal["pending", "in_progress", "completed", "cancelled"]

# ---- Makine geçmişi ----
CHANGE_CREATED: Final[str] = "created"
CHANGE_UPDATED: Final[str] = "updated"
CHANGE_LOCATION: Final[str] = "location_changed"
CHANGE_STATUS: Final[str] = "status_changed"
CHANGE_TYPES: Final = (CHANGE_CREATED, CHANGE_UPDATED, CHANGE_LOCATION, CHANGE_STATUS)

# ---- Kullanıcı ----
ALLOWED_ROLES: Final = ("viewer", "technician", "manager", "admin")
WRITE_ROLES: Final = ("manager", "admin")
WORK_ROLES: Final = ("technician", "manager", "admin")

# ---- Planlama ----
# "pending" sınıfı için ileriye bakış penceresi (gün)
PENDING_WINDOW_DAYS: Final[int] = int(os.getenv("MAINT_PENDING_WINDOW_DAYS", "30"))
UPCOMING_DEFAULT_DAYS: Final[int] = 30
UPCOMING_MIN_DAYS: Final[int] = 1
UPCOMING_MAX_DAYS: Final[int] = 365
