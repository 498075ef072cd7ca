# backend/maintrack/services/store.py
"""
Varlık deposu için ortak yardımcılar: tekil okuma, satır kilidi ve yazma kapsamı.

Her yazma `write_scope` içinde yapılır; hata olursa rollback edilir ve
SQLAlchemy hataları motorun hata sınıflarına çevrilir.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Type, TypeVar

from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from maintrack.domain.errors import ConflictError, EngineError, NotFound, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNIQUE_MARKERS = ("unique", "duplicate", "uq_", "2627", "2601", "23505")


def _dialect(db: Session) -> str:
    try:
        return db.get_bind().dialect.name
    except Exception:
        return "unknown"


def get_or_404(db: Session, model: Type[T], pk, entity: Optional[str] = None) -> T:
    row = db.get(model, pk)
    if row is None:
        raise NotFound(entity or model.__name__, pk)
    return row


def lock_for_update(db: Session, model: Type[T], pk) -> Optional[T]:
    """
    Satırı güncelleme için kilitle ve taze oku.
    MSSQL'de UPDLOCK+ROWLOCK kullanılır; diğerlerinde SELECT ... FOR UPDATE
    (SQLite bu ipucunu yok sayar).
    """
    mapper = inspect(model)
    pk_col = mapper.primary_key[0]
    if _dialect(db) == "mssql":
        db.execute(
            text(
                f"SELECT {pk_col.name} FROM [{mapper.local_table.name}] "
                f"WITH (UPDLOCK, ROWLOCK) WHERE {pk_col.name}=:pk"
            ),
            {"pk": pk},
        )
        row = db.get(model, pk)
        if row is not None:
            # Session cache ihtimaline karşı taze veriyi çek
            db.refresh(row)
        return row
    return (
        db.query(model)
        .filter(pk_col == pk)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )


def _is_unique_violation(exc: IntegrityError) -> bool:
    msg = str(getattr(exc, "orig", exc)).lower()
    return any(marker in msg for marker in _UNIQUE_MARKERS)


@contextmanager
def write_scope(db: Session, operation: str) -> Iterator[Session]:
    """Tek bir yazma birimi: başarıda commit, her hatada rollback."""
    try:
        yield db
        db.commit()
    except EngineError:
        db.rollback()
        raise
    except StaleDataError:
        db.rollback()
        logger.warning("%s: concurrent modification detected", operation)
        raise ConflictError(f"{operation}: entity was modified concurrently")
    except IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            raise ConflictError(f"{operation}: duplicate value for a unique field")
        logger.exception("%s failed (integrity)", operation)
        raise StoreError(operation)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s failed", operation)
        raise StoreError(operation)
    except Exception:
        db.rollback()
        raise


@contextmanager
def read_scope(operation: str) -> Iterator[None]:
    """Okuma sorguları: SQLAlchemy hatası loglanır, StoreError olarak yükselir."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception("%s failed", operation)
        raise StoreError(operation)
