"""
Entidades de dominio del servicio de sincronizacion.
"""
from sync_service.domain.entities.index_document import IndexDocument
from sync_service.domain.entities.job import Job
from sync_service.domain.entities.source_record import SourceRecord, SourceTranslation
from sync_service.domain.entities.watermark import Watermark


__all__ = [
    "IndexDocument",
    "Job",
    "SourceRecord",
    "SourceTranslation",
    "Watermark",
]
