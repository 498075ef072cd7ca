import logging

import pytest
from sqlalchemy import text

from maintrack.domain.errors import ConflictError, NotFound, StoreError
from maintrack.models import AppUser, Machine
from maintrack.services.store import get_or_404, lock_for_update, read_scope, write_scope


def test_unique_violation_becomes_conflict(db, users):
    with pytest.raises(ConflictError):
        with write_scope(db, "User creation"):
            db.add(AppUser(Username="admin", Role="admin"))
    # rollback sonrası oturum kullanılabilir
    assert db.query(AppUser).count() == len(users)


def test_other_errors_become_opaque_store_error(db, caplog):
    with caplog.at_level(logging.ERROR, logger="maintrack.services.store"):
        with pytest.raises(StoreError) as ei:
            with write_scope(db, "Broken write"):
                db.execute(text("INSERT INTO NoSuchTable VALUES (1)"))
    assert ei.value.status_code == 500
    assert ei.value.detail == "Broken write failed"
    assert "Broken write failed" in caplog.text


def test_read_scope_maps_errors(db):
    with pytest.raises(StoreError):
        with read_scope("Broken read"):
            db.execute(text("SELECT * FROM NoSuchTable"))


def test_domain_errors_pass_through(db):
    with pytest.raises(NotFound):
        with write_scope(db, "Lookup"):
            get_or_404(db, Machine, 1)


def test_lock_for_update_missing_row(db):
    assert lock_for_update(db, Machine, 123) is None


def test_engine_options_per_dialect():
    from sqlalchemy.engine import make_url
    from sqlalchemy.pool import StaticPool

    from maintrack.core.db import engine_options

    mem = engine_options(make_url("sqlite://"))
    assert mem["poolclass"] is StaticPool
    assert mem["connect_args"] == {"check_same_thread": False}
    assert "poolclass" not in engine_options(make_url("sqlite:///./maint.db"))
    assert engine_options(make_url("mssql+pyodbc://u:p@maintdsn"))["fast_executemany"] is True
