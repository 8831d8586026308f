from __future__ import annotations

from datetime import UTC, date, datetime, time

UTC = UTC


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """
    Normaliza para UTC aware.
    - Aware: converte para UTC.
    - Naive: assume UTC (SQLite devolve DateTime(timezone=True) sem tzinfo).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_midnight(d: date) -> datetime:
    return datetime.combine(d, time(0, 0), tzinfo=UTC)


def today_utc_midnight(now: datetime | None = None) -> datetime:
    now = as_utc(now) if now is not None else utcnow()
    return utc_midnight(now.date())


def iso_utc(dt: datetime) -> str:
    """
    Serializa em ISO 8601 sempre em UTC com sufixo 'Z'.
    """
    return as_utc(dt).isoformat().replace("+00:00", "Z")
