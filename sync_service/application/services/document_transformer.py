"""
Transformacion registro origen -> documentos del indice.

Modulo puro (sin I/O): 1 video con K traducciones produce K documentos.
"""
from typing import Any, Iterable, List

from loguru import logger

from sync_service.domain.entities.index_document import IndexDocument
from sync_service.domain.entities.source_record import SourceRecord, SourceTranslation
from sync_service.shared.utils.datetime_utils import to_epoch_seconds


def normalize_keywords(raw: Any) -> List[str]:
    """
    Normaliza keywords a lista de strings.

    - None -> []
    - "a, b" -> ["a", "b"] (filas antiguas guardan texto separado por comas)
    - lista -> items no vacios como string
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [k.strip() for k in raw.split(",") if k.strip()]
    if isinstance(raw, (list, tuple)):
        return [str(k).strip() for k in raw if k is not None and str(k).strip()]
    return [str(raw)]


def _to_document(record: SourceRecord, translation: SourceTranslation, updated_at: int) -> IndexDocument:
    for field_name in ("title", "slug"):
        if not getattr(translation, field_name):
            logger.warning(
                f"Traduccion {translation.id} del video {record.id} sin '{field_name}'; "
                f"se indexa con valor vacio."
            )

    return IndexDocument(
        id=str(translation.id),
        video_id=str(record.id),
        lang=translation.languages_code,
        title=translation.title or "",
        slug=translation.slug or "",
        keywords=normalize_keywords(translation.keywords),
        updated_at=updated_at,
    )


def transform_record(record: SourceRecord) -> List[IndexDocument]:
    """
    Expande un registro en un documento por traduccion.

    Un registro sin traducciones produce cero documentos y se reporta como
    warning de calidad de datos (no es un error).
    """
    if not record.translations:
        logger.warning(f"Video {record.id} no tiene traducciones; no genera documentos.")
        return []

    updated_at = to_epoch_seconds(record.updated_at)
    return [_to_document(record, t, updated_at) for t in record.translations]


def transform_records(records: Iterable[SourceRecord]) -> List[IndexDocument]:
    """Aplana una secuencia de registros preservando el orden de entrada."""
    docs: List[IndexDocument] = []
    for record in records:
        docs.extend(transform_record(record))
    return docs
