# backend/maintrack/scripts/seed.py
"""
Demo verisi (idempotent): kullanıcılar, makineler, bakım planları.

    python -m maintrack.scripts.seed

Sonda her kullanıcı için bir bearer token basar; API'yi denemek için
Authorization: Bearer <token> başlığıyla kullanılır.
"""
from contextlib import contextmanager
from datetime import date, timedelta

from sqlalchemy import select

from maintrack.core.db import Base, SessionLocal, engine
from maintrack.core.security import create_access_token
from maintrack.models import AppUser, MaintenanceSchedule
from maintrack.services import machine_service, schedule_service

# ---------- küçük yardımcılar ----------

@contextmanager
def session_scope():
    """Tek seferlik session aç/kapat (hata olursa rollback)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_one(db, model, **by):
    """Tekil alanlara göre satır getir (yoksa None)."""
    return db.execute(select(model).filter_by(**by)).scalars().first()

def get_or_create(db, model, unique_by: dict, defaults: dict | None = None):
    """unique_by ile ara, yoksa oluştur (idempotent)."""
    inst = get_one(db, model, **unique_by)
    if inst:
        return inst, False
    inst = model(**{**unique_by, **(defaults or {})})
    db.add(inst)
    # çağıran commit edeceği için burada commit yok
    return inst, True

# ---------- tohum veriler ----------

USERS = [
    {"Username": "admin",   "FullName": "Sistem Yöneticisi", "Role": "admin"},
    {"Username": "mudur",   "FullName": "Bakım Müdürü",      "Role": "manager"},
    {"Username": "ali",     "FullName": "Ali Usta",          "Role": "technician"},
    {"Username": "zeynep",  "FullName": "Zeynep Usta",       "Role": "technician"},
]

MACHINES = [
    {"MachineCode": "M-001", "Name": "Pres Hattı", "Type": "press",  "Location": "A-1", "Department": "Üretim"},
    {"MachineCode": "M-002", "Name": "Kesim",      "Type": "cutter", "Location": "B-2", "Department": "Üretim"},
    {"MachineCode": "M-003", "Name": "Kompresör",  "Type": "air",    "Location": "C-1", "Department": "Enerji"},
]

# (plan kodu, makine kodu, tür, aralık, başlangıç bugünden kaç gün önce)
SCHEDULES = [
    ("S-001", "M-001", "preventive", 30, 40),
    ("S-002", "M-002", "lubrication", 7, 3),
    ("S-003", "M-003", "inspection", 90, 0),
]

def run():
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        print(">> Seeding: AppUser")
        for u in USERS:
            get_or_create(db, AppUser, {"Username": u["Username"]}, defaults=u)

    db = SessionLocal()
    try:
        admin = get_one(db, AppUser, Username="admin")

        print(">> Seeding: Machine")
        for m in MACHINES:
            if machine_service.get_machine_by_code(db, m["MachineCode"]) is None:
                machine_service.create_machine(db, m, changed_by=admin.UserID)

        print(">> Seeding: MaintenanceSchedule")
        today = date.today()
        for code, machine_code, kind, interval, back in SCHEDULES:
            if get_one(db, MaintenanceSchedule, ScheduleCode=code):
                continue
            machine = machine_service.get_machine_by_code(db, machine_code)
            schedule_service.create_schedule(db, {
                "ScheduleCode": code,
                "MachineID": machine.MachineID,
                "Type": kind,
                "IntervalDays": interval,
                "StartDate": today - timedelta(days=back),
                "TaskChecklist": ["Görsel kontrol", "Yağlama"],
            })

        print(">> Tokens")
        for u in db.execute(select(AppUser).order_by(AppUser.UserID)).scalars():
            print(f"{u.Username:<8} {u.Role:<11} {create_access_token(u.Username, u.Role)}")
    finally:
        db.close()

    print("✓ Seed tamam")

if __name__ == "__main__":
    run()
