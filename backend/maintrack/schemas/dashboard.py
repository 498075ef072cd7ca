# maintrack/schemas/dashboard.py
import datetime as dt
from typing import Literal
from pydantic import BaseModel

class DashboardStats(BaseModel):
    totalMachines: int
    pendingMaintenance: int
    completedThisMonth: int
    overdue: int

class CalendarDay(BaseModel):
    date: dt.date
    maintenanceCount: int
    status: Literal["pending", "overdue"]
