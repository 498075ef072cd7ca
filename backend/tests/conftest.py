# backend/tests/conftest.py
import os

# Uygulama import edilmeden önce: bellek içi SQLite
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

from maintrack.core.clock import get_clock
from maintrack.core.db import Base, SessionLocal, engine, get_db
from maintrack.core.security import get_current_user
from maintrack.main import app
from maintrack.models import AppUser
from maintrack.services import machine_service, record_service, schedule_service

NOW = datetime(2025, 3, 10, 9, 0, 0)
TODAY = NOW.date()


# ---- Şema: her test temiz başlar ----
@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ---- Yazma sayacı: INSERT / UPDATE / DELETE ifadeleri ----
class WriteCounter:
    def __init__(self):
        self.statements = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        verb = statement.lstrip().split(None, 1)[0].upper()
        if verb in ("INSERT", "UPDATE", "DELETE"):
            self.statements.append(statement)

    @property
    def count(self) -> int:
        return len(self.statements)

    def reset(self):
        self.statements.clear()


@pytest.fixture
def writes():
    counter = WriteCounter()
    event.listen(engine, "before_cursor_execute", counter)
    try:
        yield counter
    finally:
        event.remove(engine, "before_cursor_execute", counter)


# ---- Kullanıcılar ----
@pytest.fixture
def users(db):
    rows = {
        "admin": AppUser(Username="admin", FullName="Admin", Role="admin"),
        "manager": AppUser(Username="mudur", FullName="Bakım Müdürü", Role="manager"),
        "tech": AppUser(Username="ali", FullName="Ali Usta", Role="technician"),
        "tech2": AppUser(Username="zeynep", FullName="Zeynep Usta", Role="technician"),
        "viewer": AppUser(Username="izleyici", FullName="İzleyici", Role="viewer"),
    }
    db.add_all(rows.values())
    db.commit()
    return rows


# ---- Örnek veri kurucuları ----
@pytest.fixture
def make_machine(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "MachineCode": f"M-{counter['n']:03d}",
            "Name": f"Pres {counter['n']}",
            "Type": "press",
            "Location": "A-1",
            "Department": "Üretim",
        }
        data.update(overrides)
        changed_by = data.pop("changed_by", None)
        return machine_service.create_machine(db, data, changed_by=changed_by, now=NOW)

    return _make


@pytest.fixture
def make_schedule(db):
    counter = {"n": 0}

    def _make(machine, **overrides):
        counter["n"] += 1
        data = {
            "ScheduleCode": f"S-{counter['n']:03d}",
            "MachineID": machine.MachineID,
            "Type": "preventive",
            "IntervalDays": 30,
            "StartDate": date(2025, 1, 1),
        }
        data.update(overrides)
        return schedule_service.create_schedule(db, data, now=NOW)

    return _make


@pytest.fixture
def make_record(db, users):
    counter = {"n": 0}

    def _make(machine, schedule=None, now=NOW, **overrides):
        counter["n"] += 1
        data = {
            "RecordCode": f"R-{counter['n']:03d}",
            "MachineID": machine.MachineID,
            "ScheduleID": schedule.ScheduleID if schedule is not None else None,
            "TechnicianID": users["tech"].UserID,
            "MaintenanceDate": now.date(),
            "Type": "preventive",
            "WorkDescription": "Yağlama ve kontrol",
        }
        data.update(overrides)
        return record_service.create_record(db, data, now=now)

    return _make


# ---- HTTP istemcisi: sabit saat + seçilebilir kullanıcı ----
class ActingUser:
    def __init__(self, user):
        self.user = user

    def __call__(self):
        return self.user


@pytest.fixture
def acting(users):
    return ActingUser(users["admin"])


@pytest.fixture
def client(db, acting):
    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    app.dependency_overrides[get_current_user] = acting
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def raw_client(db):
    """Kimlik override'ı olmadan: gerçek bearer token doğrulaması."""
    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
