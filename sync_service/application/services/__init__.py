"""
Servicios de aplicacion: transformacion pura y entrega al indice.
"""
from sync_service.application.services.document_transformer import (
    normalize_keywords,
    transform_record,
    transform_records,
)
from sync_service.application.services.fan_out import BatchOutcome, fan_out
from sync_service.application.services.upsert_executor import UpsertExecutor


__all__ = [
    "BatchOutcome",
    "UpsertExecutor",
    "fan_out",
    "normalize_keywords",
    "transform_record",
    "transform_records",
]
