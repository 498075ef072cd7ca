from .user import AppUser
from .machine import Machine
from .maintenance_schedule import MaintenanceSchedule
from .maintenance_record import MaintenanceRecord
from .machine_history import MachineHistory
__all__ = ["AppUser","Machine","MaintenanceSchedule","MaintenanceRecord","MachineHistory"]
