"""
Construccion de triggers cron.

Formatos aceptados:
- 6 campos: "second minute hour day month day_of_week" (p.ej. "*/25 * * * * *")
- 5 campos: crontab estandar "minute hour day month day_of_week"

Nota: day_of_week sigue la semantica de APScheduler (0 = lunes); se
recomienda usar nombres (mon, tue, ...).
"""
from apscheduler.triggers.cron import CronTrigger

from sync_service.shared.exceptions.sync import InvalidScheduleError


def build_cron_trigger(schedule: str, timezone: str = "UTC") -> CronTrigger:
    """
    Construye un CronTrigger a partir de la expresion.

    Raises:
        InvalidScheduleError: si la expresion o la zona horaria no son validas
    """
    fields = (schedule or "").split()
    try:
        if len(fields) == 6:
            second, minute, hour, day, month, day_of_week = fields
            return CronTrigger(
                second=second,
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=day_of_week,
                timezone=timezone,
            )
        if len(fields) == 5:
            return CronTrigger.from_crontab(" ".join(fields), timezone=timezone)
    except (ValueError, TypeError, KeyError) as e:
        raise InvalidScheduleError(schedule, str(e)) from e

    raise InvalidScheduleError(schedule, f"se esperaban 5 o 6 campos, se recibieron {len(fields)}")
