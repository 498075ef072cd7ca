"""initial schema: AppUser, Machine, MaintenanceSchedule, MaintenanceRecord, MachineHistory

Revision ID: 5c1e0a7d2b94
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d2b94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("UpdatedAt", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("Version", sa.Integer(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "AppUser",
        sa.Column("UserID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Username", sa.String(50), nullable=False, unique=True),
        sa.Column("FullName", sa.String(100)),
        sa.Column("Email", sa.String(200)),
        sa.Column("Role", sa.String(20), nullable=False, server_default="technician"),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("Role in ('viewer','technician','manager','admin')", name="CK_AppUser_Role"),
    )

    op.create_table(
        "Machine",
        sa.Column("MachineID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("MachineCode", sa.String(50), nullable=False, unique=True),
        sa.Column("Name", sa.String(200), nullable=False),
        sa.Column("Type", sa.String(100), nullable=False),
        sa.Column("Manufacturer", sa.String(200)),
        sa.Column("Model", sa.String(200)),
        sa.Column("SerialNumber", sa.String(100)),
        sa.Column("Location", sa.String(200), nullable=False),
        sa.Column("Department", sa.String(200)),
        sa.Column("Status_s", sa.String(20), nullable=False, server_default="operational"),
        sa.Column("InstallationDate", sa.Date()),
        sa.Column("Notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("Status_s in ('operational','maintenance','down')", name="CK_Machine_Status"),
    )

    op.create_table(
        "MaintenanceSchedule",
        sa.Column("ScheduleID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ScheduleCode", sa.String(50), nullable=False, unique=True),
        sa.Column("MachineID", sa.Integer(), sa.ForeignKey("Machine.MachineID"), nullable=False),
        sa.Column("Type", sa.String(100), nullable=False),
        sa.Column("IntervalDays", sa.Integer(), nullable=False),
        sa.Column("StartDate", sa.Date(), nullable=False),
        sa.Column("NextMaintenanceDate", sa.Date(), nullable=False),
        sa.Column("Priority_s", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("TaskChecklist", sa.JSON()),
        sa.Column("RequiredParts", sa.JSON()),
        sa.Column("RequiredTools", sa.JSON()),
        sa.Column("EstimatedDuration", sa.Integer()),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("IntervalDays > 0", name="CK_Schedule_Interval_Positive"),
        sa.CheckConstraint("Priority_s in ('low','medium','high','critical')", name="CK_Schedule_Priority"),
        sa.CheckConstraint("EstimatedDuration IS NULL OR EstimatedDuration >= 0", name="CK_Schedule_Duration"),
    )
    op.create_index("ix_MaintenanceSchedule_MachineID", "MaintenanceSchedule", ["MachineID"])
    op.create_index("ix_MaintenanceSchedule_NextMaintenanceDate", "MaintenanceSchedule", ["NextMaintenanceDate"])

    op.create_table(
        "MaintenanceRecord",
        sa.Column("RecordID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("RecordCode", sa.String(50), nullable=False, unique=True),
        sa.Column("MachineID", sa.Integer(), sa.ForeignKey("Machine.MachineID"), nullable=False),
        sa.Column("ScheduleID", sa.Integer(), sa.ForeignKey("MaintenanceSchedule.ScheduleID")),
        sa.Column("MaintenanceDate", sa.Date(), nullable=False),
        sa.Column("Type", sa.String(100), nullable=False),
        sa.Column("TechnicianID", sa.Integer(), sa.ForeignKey("AppUser.UserID"), nullable=False),
        sa.Column("WorkDescription", sa.Text(), nullable=False),
        sa.Column("PartsUsed", sa.JSON()),
        sa.Column("Cost", sa.Numeric(10, 2)),
        sa.Column("Duration", sa.Integer()),
        sa.Column("Status_s", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("Notes", sa.Text()),
        sa.Column("WorkImages", sa.JSON()),
        sa.Column("CompletedAt", sa.DateTime()),
        *_timestamps(),
        sa.CheckConstraint(
            "Status_s in ('pending','in_progress','completed','cancelled')", name="CK_Record_Status"
        ),
        sa.CheckConstraint("Cost IS NULL OR Cost >= 0", name="CK_Record_Cost"),
        sa.CheckConstraint("Duration IS NULL OR Duration >= 0", name="CK_Record_Duration"),
    )
    op.create_index("ix_MaintenanceRecord_MachineID", "MaintenanceRecord", ["MachineID"])
    op.create_index("ix_MaintenanceRecord_ScheduleID", "MaintenanceRecord", ["ScheduleID"])
    op.create_index("ix_MaintenanceRecord_MaintenanceDate", "MaintenanceRecord", ["MaintenanceDate"])
    op.create_index("ix_MaintenanceRecord_TechnicianID", "MaintenanceRecord", ["TechnicianID"])

    op.create_table(
        "MachineHistory",
        sa.Column("HistoryID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "MachineID", sa.Integer(),
            sa.ForeignKey("Machine.MachineID", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("ChangeType", sa.String(30), nullable=False),
        sa.Column("ChangeDescription", sa.Text(), nullable=False),
        sa.Column("OldValues", sa.JSON()),
        sa.Column("NewValues", sa.JSON()),
        sa.Column("ChangedBy", sa.Integer(), sa.ForeignKey("AppUser.UserID"), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "ChangeType in ('created','updated','location_changed','status_changed')",
            name="CK_History_ChangeType",
        ),
    )
    op.create_index("ix_MachineHistory_MachineID", "MachineHistory", ["MachineID"])


def downgrade():
    # Bağımlılık sırasının tersi
    op.drop_index("ix_MachineHistory_MachineID", table_name="MachineHistory")
    op.drop_table("MachineHistory")
    for ix in ("TechnicianID", "MaintenanceDate", "ScheduleID", "MachineID"):
        op.drop_index(f"ix_MaintenanceRecord_{ix}", table_name="MaintenanceRecord")
    op.drop_table("MaintenanceRecord")
    op.drop_index("ix_MaintenanceSchedule_NextMaintenanceDate", table_name="MaintenanceSchedule")
    op.drop_index("ix_MaintenanceSchedule_MachineID", table_name="MaintenanceSchedule")
    op.drop_table("MaintenanceSchedule")
    op.drop_table("Machine")
    op.drop_table("AppUser")
