# backend/maintrack/services/update_guard.py
"""
Değişiklik algılayan güncelleme koruması.

Önerilen alanlar saklı değerlerle tek tek (tek seviye) karşılaştırılır;
hiçbir alan değişmiyorsa yazma yapılmaz, kayıt olduğu gibi döner. Değişen
alanlar + yenilenmiş UpdatedAt yazılır. Her varlık için güncellenebilir
alanlar açıkça listelenir; listede olmayan alan ValidationError'dır.
"""
from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, Generic, Iterable, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy.orm import Session

from maintrack.core.clock import resolve_now
from maintrack.domain.errors import ConflictError, NotFound, ValidationError
from maintrack.services.store import get_or_404, lock_for_update, write_scope

logger = logging.getLogger(__name__)

T = TypeVar("T")
Changes = Dict[str, Tuple[Any, Any]]

MONEY_PLACES = Decimal("0.01")


# ---- Alan dönüştürücüler (ValueError/TypeError -> ValidationError) ----
def as_str(v: Any) -> str:
    if not isinstance(v, str):
        raise TypeError("expected a string")
    return v

def as_date(v: Any) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        return date.fromisoformat(v)
    raise TypeError("expected a date")

def as_datetime(v: Any) -> datetime:
    if isinstance(v, datetime):
        return v
    if isinstance(v, str):
        return datetime.fromisoformat(v)
    raise TypeError("expected a datetime")

def as_non_negative_int(v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v < 0:
        raise ValueError("expected a non-negative integer")
    return v

def as_positive_int(v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ValueError("expected a positive integer")
    return v

def as_money(v: Any) -> Decimal:
    try:
        d = v if isinstance(v, Decimal) else Decimal(str(v))
        d = d.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError("expected a decimal amount")
    if d < 0:
        raise ValueError("expected a non-negative amount")
    return d

def as_bool(v: Any) -> bool:
    if not isinstance(v, bool):
        raise TypeError("expected a boolean")
    return v

def as_str_list(v: Any) -> list:
    if not isinstance(v, (list, tuple)) or not all(isinstance(x, str) for x in v):
        raise TypeError("expected a list of strings")
    return list(v)

def one_of(choices: Sequence[str]) -> Callable[[Any], str]:
    def _coerce(v: Any) -> str:
        if v not in choices:
            raise ValueError(f"expected one of {', '.join(choices)}")
        return v
    return _coerce


def money_eq(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is b
    return as_money(a) == as_money(b)


@dataclass(frozen=True)
class TrackedField:
    name: str
    coerce: Callable[[Any], Any] = as_str
    nullable: bool = True
    equals: Callable[[Any, Any], bool] = operator.eq


# Güncellemeyle değişmeyen alan: mevcut değerle aynıysa sessizce düşer
@dataclass(frozen=True)
class FrozenField(TrackedField):
    reason: str = ""

    def message(self) -> str:
        return self.reason or f"{self.name} cannot be changed"


@dataclass
class UpdateResult(Generic[T]):
    entity: T
    changes: Changes = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def _field_map(fields: Iterable[TrackedField]) -> Dict[str, TrackedField]:
    return {f.name: f for f in fields}


def normalize(proposed: Mapping[str, Any], fields: Iterable[TrackedField]) -> Dict[str, Any]:
    """Bilinmeyen alanı reddeder, değerleri alan tipine çevirir."""
    by_name = _field_map(fields)
    unknown = sorted(set(proposed) - set(by_name))
    if unknown:
        raise ValidationError(f"Field(s) not updatable: {', '.join(unknown)}", meta={"fields": unknown})

    clean: Dict[str, Any] = {}
    for name, value in proposed.items():
        f = by_name[name]
        if value is None:
            if not f.nullable:
                raise ValidationError(f"{name} cannot be null", meta={"field": name})
            clean[name] = None
            continue
        try:
            clean[name] = f.coerce(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid value for {name}: {e}", meta={"field": name})
    return clean


def diff(entity: Any, proposed: Mapping[str, Any], fields: Iterable[TrackedField]) -> Changes:
    by_name = _field_map(fields)
    changes: Changes = {}
    for name, new in proposed.items():
        old = getattr(entity, name)
        if not by_name[name].equals(old, new):
            changes[name] = (old, new)
    return changes


def strip_frozen(entity: Any, proposed: Mapping[str, Any], frozen: Iterable[FrozenField]) -> Dict[str, Any]:
    """Değişmez alanlar: saklı değere eşitse atılır, farklıysa ValidationError."""
    rest = dict(proposed)
    for f in frozen:
        if f.name not in rest:
            continue
        value = normalize({f.name: rest.pop(f.name)}, [f])[f.name]
        if not f.equals(getattr(entity, f.name), value):
            raise ValidationError(f.message(), meta={"field": f.name})
    return rest


def guarded_update(
    db: Session,
    model: Type[T],
    pk: Any,
    proposed: Mapping[str, Any],
    *,
    fields: Sequence[TrackedField],
    frozen: Sequence[FrozenField] = (),
    operation: str,
    entity_name: Optional[str] = None,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
    derive: Optional[Callable[[T, Changes], Changes]] = None,
) -> UpdateResult[T]:
    """
    update(id, fields) sözleşmesi:
      - kayıt yok  -> NotFound (alanlar geçersiz olsa bile, önce bu)
      - boş öneri  -> mevcut kayıt, yazma yok
      - fark yok   -> mevcut kayıt, yazma yok
      - fark var   -> sadece değişen alanlar + UpdatedAt yazılır

    `frozen` alanlar (iş kimliği, sahip referansı, iş akışı alanları)
    mevcut değerle aynı gönderilirse yok sayılır; farklıysa reddedilir.
    `derive`, saptanan farka bağlı türetilmiş alanlar eklemek içindir
    (ör. plan aralığı değişince vade tarihinin yeniden hizalanması).
    """
    name = entity_name or model.__name__
    if not proposed:
        return UpdateResult(get_or_404(db, model, pk, name))

    with write_scope(db, operation):
        row = lock_for_update(db, model, pk)
        if row is None:
            raise NotFound(name, pk)
        if expected_version is not None and getattr(row, "Version", None) != expected_version:
            raise ConflictError(
                f"{name} {pk} has version {row.Version}, expected {expected_version}",
                meta={"version": row.Version, "expectedVersion": expected_version},
            )

        clean = normalize(strip_frozen(row, proposed, frozen), fields)
        changes = diff(row, clean, fields)
        if not changes:
            logger.debug("%s %s: no field changed, skipping write", name, pk)
            return UpdateResult(row)

        if derive is not None:
            changes.update(derive(row, changes))

        for attr, (_old, new) in changes.items():
            setattr(row, attr, new)
        row.UpdatedAt = resolve_now(now)
        db.flush()

    logger.info("%s %s updated: %s", name, pk, ", ".join(sorted(changes)))
    return UpdateResult(row, changes)
