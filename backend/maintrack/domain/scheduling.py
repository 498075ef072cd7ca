# backend/maintrack/domain/scheduling.py
"""
Periyodik bakım tarih hesabı.

Bir planın vade tarihleri `StartDate + k * IntervalDays` (k >= 0) ızgarası
üzerindedir. Tamamlanan her döngü vadeyi bir aralık ileri iter; "bugün"
hesaba katılmaz, böylece kaçırılan döngüler birikmez, sırayla kapanır.
"""
from datetime import date, timedelta
from typing import Literal

from .constants import PENDING_WINDOW_DAYS
from .errors import ValidationError

ScheduleState = Literal["scheduled", "pending", "overdue"]


def _check_interval(interval_days: int) -> None:
    if isinstance(interval_days, bool) or not isinstance(interval_days, int) or interval_days <= 0:
        raise ValidationError("IntervalDays must be a positive integer")


def is_on_grid(start: date, interval_days: int, d: date) -> bool:
    _check_interval(interval_days)
    delta = (d - start).days
    return delta >= 0 and delta % interval_days == 0


def first_due_on_or_after(start: date, interval_days: int, anchor: date) -> date:
    """Izgaradaki `anchor` veya sonrasındaki ilk tarih (anchor < start ise start)."""
    _check_interval(interval_days)
    if anchor <= start:
        return start
    cycles = -(-(anchor - start).days // interval_days)  # tavan bölme
    return start + timedelta(days=cycles * interval_days)


def advance(next_date: date, interval_days: int, cycles: int = 1) -> date:
    _check_interval(interval_days)
    if cycles < 0:
        raise ValidationError("cycles must be >= 0")
    return next_date + timedelta(days=interval_days * cycles)


def classify(next_date: date, today: date, window_days: int = PENDING_WINDOW_DAYS) -> ScheduleState:
    if next_date < today:
        return "overdue"
    if (next_date - today).days <= window_days:
        return "pending"
    return "scheduled"
