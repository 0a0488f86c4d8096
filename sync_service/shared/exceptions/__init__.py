"""
Excepciones compartidas del servicio.
"""
from sync_service.shared.exceptions.base import AppException
from sync_service.shared.exceptions.sync import (
    IndexNotReadyError,
    InvalidScheduleError,
    JobInitializationError,
    JobNotFoundError,
    SearchIndexError,
    SourceUnavailableError,
)


__all__ = [
    "AppException",
    "IndexNotReadyError",
    "InvalidScheduleError",
    "JobInitializationError",
    "JobNotFoundError",
    "SearchIndexError",
    "SourceUnavailableError",
]
