"""
Excepciones del motor de sincronizacion.

Taxonomia:
- Dependencia no disponible (indice no listo, base caida): se aborta el lote
  completo y el watermark no avanza.
- Fallo por documento: se registra y el lote continua (no es una excepcion
  que salga del executor).
- Fallo de inicializacion de un job: el job queda deshabilitado.
"""
from typing import Optional

from sync_service.shared.exceptions.base import AppException


class SourceUnavailableError(AppException):
    """La base de datos origen no respondio (conexion o timeout)."""

    def __init__(self, message: str = "No se pudo consultar la base de datos origen"):
        super().__init__(
            message=message,
            error_code="DATABASE_CONNECTION_FAILED",
        )


class IndexNotReadyError(AppException):
    """El servicio de indice reporto que no esta listo (health check)."""

    def __init__(self, message: str = "El servicio de busqueda no esta listo"):
        super().__init__(
            message=message,
            error_code="SEARCH_SERVICE_UNAVAILABLE",
        )


class SearchIndexError(AppException):
    """Error de integracion con el servicio de indice."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message=message,
            error_code="SEARCH_INDEX_ERROR",
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code


class InvalidScheduleError(AppException):
    """Expresion cron invalida."""

    def __init__(self, schedule: str, reason: str = ""):
        super().__init__(
            message=f"Expresion de schedule invalida: '{schedule}'" + (f" ({reason})" if reason else ""),
            error_code="INVALID_SCHEDULE",
            details={"schedule": schedule},
        )
        self.schedule = schedule


class JobNotFoundError(AppException):
    """Excepcion cuando no existe un job registrado con ese id."""

    def __init__(self, job_id: str):
        super().__init__(
            message=f"Job '{job_id}' no registrado",
            error_code="JOB_NOT_FOUND",
            details={"job_id": job_id},
        )
        self.job_id = job_id


class JobInitializationError(AppException):
    """El inicializador de un job fallo; el job queda deshabilitado."""

    def __init__(self, job_id: str, reason: str):
        super().__init__(
            message=f"Fallo la inicializacion del job '{job_id}': {reason}",
            error_code="JOB_INITIALIZATION_FAILED",
            details={"job_id": job_id},
        )
        self.job_id = job_id
