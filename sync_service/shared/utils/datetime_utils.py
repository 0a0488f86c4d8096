"""
Utilidades puras para manejo de fechas.

Se mantienen libres de I/O para poder testearlas facilmente.
"""
from datetime import datetime, timezone
from typing import Optional


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    Algunos drivers (p.ej. SQLite) devuelven datetimes naive; se asume que
    ya estan en UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_seconds(dt: Optional[datetime]) -> int:
    """
    Convierte a segundos epoch (entero, truncado).

    None se interpreta como epoch (0).
    """
    if dt is None:
        return 0
    delta = ensure_utc(dt) - EPOCH
    return delta.days * 86400 + delta.seconds


def parse_iso_datetime(value: str) -> datetime:
    """
    Parsea un ISO8601 (acepta sufijo 'Z') y lo normaliza a UTC.

    Raises:
        ValueError: si el string no es una fecha valida
    """
    return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
