"""
Repositorio SQLAlchemy de registros origen (video + video_translations).
"""
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sync_service.domain.entities.source_record import SourceRecord, SourceTranslation
from sync_service.domain.repositories.source_repository import ISourceRecordRepository
from sync_service.infrastructure.database.models import VideoModel, VideoTranslationModel
from sync_service.shared.exceptions.sync import SourceUnavailableError
from sync_service.shared.utils.datetime_utils import ensure_utc


# Tamaño de chunk para clausulas IN
_ID_CHUNK_SIZE = 1000

# Rango de la PK `video_translations.id` (INTEGER)
_MAX_TRANSLATION_ID = 2**31 - 1


def _parse_translation_id(raw) -> Optional[int]:
    """Id de traduccion valido o None (ids con otro formato nunca son elegibles)."""
    value = str(raw)
    if not (value.isascii() and value.isdecimal()):
        return None
    parsed = int(value)
    return parsed if parsed <= _MAX_TRANSLATION_ID else None


class SourceRecordRepository(ISourceRecordRepository):
    """
    Lectura del CMS. Un registro es elegible si su estado esta en
    `eligible_statuses`; una traduccion es elegible si su video lo es.
    """
    
    def __init__(self, db: AsyncSession, eligible_statuses: Sequence[str]):
        if not eligible_statuses:
            raise ValueError("Se requiere al menos un estado elegible")
        self.db = db
        self.eligible_statuses = list(eligible_statuses)

    async def find_changed_eligible_records(self, since: datetime, limit: int) -> List[SourceRecord]:
        """
        Videos elegibles con updated_at > since, ordenados por (updated_at, id).

        Si el lote se llena, se completa con los videos que comparten el
        ultimo updated_at, para que el cursor pueda avanzar a ese valor sin
        saltarse empates.
        """
        since_utc = ensure_utc(since)
        try:
            query = (
                select(VideoModel)
                .where(
                    VideoModel.status.in_(self.eligible_statuses),
                    VideoModel.updated_at > since_utc,
                )
                .order_by(VideoModel.updated_at.asc(), VideoModel.id.asc())
                .limit(limit)
            )
            result = await self.db.execute(query)
            rows = list(result.scalars().all())

            if rows and len(rows) >= limit:
                boundary = rows[-1].updated_at
                ties_query = (
                    select(VideoModel)
                    .where(
                        VideoModel.status.in_(self.eligible_statuses),
                        VideoModel.updated_at == boundary,
                        VideoModel.id.notin_([r.id for r in rows]),
                    )
                    .order_by(VideoModel.id.asc())
                )
                ties = (await self.db.execute(ties_query)).scalars().all()
                if ties:
                    logger.debug(f"Lote extendido con {len(ties)} empate(s) en updated_at={boundary}")
                    rows.extend(ties)
        except SQLAlchemyError as e:
            raise SourceUnavailableError(f"Error consultando videos modificados: {e}") from e

        return [self._to_entity(row) for row in rows]

    async def find_eligible_document_ids(self, candidate_ids: Iterable[str]) -> Set[str]:
        """
        Ids de traduccion (como string) cuyo video sigue elegible.
        Ids no numericos o fuera del rango de la PK nunca son elegibles.
        """
        parsed = (_parse_translation_id(i) for i in candidate_ids)
        numeric_ids = sorted({i for i in parsed if i is not None})
        eligible: Set[str] = set()

        try:
            for start in range(0, len(numeric_ids), _ID_CHUNK_SIZE):
                chunk = numeric_ids[start:start + _ID_CHUNK_SIZE]
                query = (
                    select(VideoTranslationModel.id)
                    .join(VideoModel, VideoModel.id == VideoTranslationModel.video_id)
                    .where(
                        VideoTranslationModel.id.in_(chunk),
                        VideoModel.status.in_(self.eligible_statuses),
                    )
                )
                result = await self.db.execute(query)
                eligible.update(str(row_id) for row_id in result.scalars().all())
        except SQLAlchemyError as e:
            raise SourceUnavailableError(f"Error verificando elegibilidad: {e}") from e

        return eligible

    @staticmethod
    def _to_entity(model: VideoModel) -> SourceRecord:
        return SourceRecord(
            id=model.id,
            status=model.status,
            updated_at=ensure_utc(model.updated_at),
            translations=tuple(
                SourceTranslation(
                    id=t.id,
                    languages_code=t.languages_code,
                    title=t.title,
                    slug=t.slug,
                    keywords=t.keywords,
                )
                for t in model.translations
            ),
        )
