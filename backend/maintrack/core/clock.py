# backend/maintrack/core/clock.py
"""
Motorun "şimdi" kaynağı.

Servisler duvar saatini doğrudan okumaz; `now` / `today` argümanı alır.
HTTP katmanı bunu `get_clock` bağımlılığından çözer, testler de
`app.dependency_overrides[get_clock]` ile sabit bir saat verir.
"""
from datetime import date, datetime, timezone
from typing import Callable, Optional

# Naive UTC datetime döndüren sıfır argümanlı çağrılabilir
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    return now if now is not None else utc_now()


def resolve_today(today: Optional[date] = None) -> date:
    return today if today is not None else utc_now().date()


def get_clock() -> Clock:
    return utc_now
