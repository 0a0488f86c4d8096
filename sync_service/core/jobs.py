"""
Construccion de los jobs del servicio.

Cada tick abre su propia sesion de base de datos, construye los
repositorios, ejecuta el caso de uso y hace commit. Los jobs no comparten
estado mutable entre si: solo el cliente de Typesense (sin estado).
"""
from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sync_service.application.services.upsert_executor import UpsertExecutor
from sync_service.application.use_cases.collection_use_cases import EnsureCollectionUseCase
from sync_service.application.use_cases.prune_use_cases import (
    JOB_NAME as PRUNE_JOB_NAME,
    PruneRemovedItemsUseCase,
    PruneResult,
)
from sync_service.application.use_cases.sync_use_cases import (
    JOB_NAME as SYNC_JOB_NAME,
    SyncTickResult,
    SyncUpdatedItemsUseCase,
)
from sync_service.core.config import Settings
from sync_service.domain.entities.job import Job
from sync_service.domain.entities.watermark import Watermark
from sync_service.domain.repositories.search_index import ISearchIndexClient
from sync_service.infrastructure.external.typesense.schema import build_collection_schema
from sync_service.infrastructure.repositories.source_repository_impl import SourceRecordRepository
from sync_service.infrastructure.repositories.sync_state_repository_impl import SyncStateRepository


CREATE_COLLECTION_JOB_NAME = "create-collection"


class SyncJobFactory:
    """
    Fabrica de descriptores Job a partir de la configuracion.

    Args:
        settings: Configuracion del servicio
        index: Cliente del indice de busqueda
        session_factory: Fabrica de sesiones (una sesion por tick)
    """

    def __init__(
        self,
        settings: Settings,
        index: ISearchIndexClient,
        session_factory: async_sessionmaker,
    ) -> None:
        self.settings = settings
        self.index = index
        self.session_factory = session_factory

    def _executor(self) -> UpsertExecutor:
        return UpsertExecutor(
            self.index,
            self.settings.INDEX_COLLECTION,
            max_concurrency=self.settings.INDEX_MAX_CONCURRENCY,
            request_timeout_s=self.settings.INDEX_REQUEST_TIMEOUT_S,
        )

    def _sync_use_case(self, db: AsyncSession) -> SyncUpdatedItemsUseCase:
        return SyncUpdatedItemsUseCase(
            records=SourceRecordRepository(db, self.settings.eligible_statuses),
            state=SyncStateRepository(db, self.settings.SYNC_STATE_ID),
            executor=self._executor(),
            watermark_id=self.settings.SYNC_STATE_ID,
            default_batch_size=self.settings.SYNC_BATCH_SIZE,
            initial_cursor=self.settings.SYNC_INITIAL_CURSOR,
            query_timeout_s=self.settings.SOURCE_QUERY_TIMEOUT_S,
        )

    async def ensure_collection(self) -> bool:
        schema = build_collection_schema(self.settings.INDEX_COLLECTION)
        return await EnsureCollectionUseCase(self.index, schema).execute()

    async def load_watermark(self) -> Watermark:
        """Lee (sin escribir) el watermark con el que arrancara el sync."""
        async with self.session_factory() as db:
            watermark = await self._sync_use_case(db).load_watermark()
        logger.info(
            f"[{SYNC_JOB_NAME}] Watermark inicial: {watermark.last_sync_time.isoformat()} "
            f"(batch_size={watermark.batch_size})"
        )
        return watermark

    async def run_sync_tick(self) -> SyncTickResult:
        async with self.session_factory() as db:
            try:
                result = await self._sync_use_case(db).execute()
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return result

    async def run_prune(self) -> PruneResult:
        async with self.session_factory() as db:
            use_case = PruneRemovedItemsUseCase(
                records=SourceRecordRepository(db, self.settings.eligible_statuses),
                index=self.index,
                collection=self.settings.INDEX_COLLECTION,
                page_size=self.settings.PRUNE_PAGE_SIZE,
                max_pages=self.settings.PRUNE_MAX_PAGES,
                max_concurrency=self.settings.INDEX_MAX_CONCURRENCY,
                request_timeout_s=self.settings.INDEX_REQUEST_TIMEOUT_S,
                query_timeout_s=self.settings.SOURCE_QUERY_TIMEOUT_S,
            )
            return await use_case.execute()

    async def reset_watermark(self, since: datetime, batch_size: Optional[int] = None) -> Watermark:
        """
        Re-sync administrativo: fija el cursor en `since`, incluso hacia atras.
        """
        async with self.session_factory() as db:
            state = SyncStateRepository(db, self.settings.SYNC_STATE_ID)
            current = await state.read_watermark()
            watermark = Watermark(
                id=self.settings.SYNC_STATE_ID,
                last_sync_time=since,
                batch_size=batch_size or (current.batch_size if current else self.settings.SYNC_BATCH_SIZE),
            )
            persisted = await state.write_watermark(watermark)
            await db.commit()
        logger.warning(f"[{SYNC_JOB_NAME}] Watermark reiniciado a {persisted.last_sync_time.isoformat()}")
        return persisted

    async def _sync_body(self) -> None:
        await self.run_sync_tick()

    async def _prune_body(self) -> None:
        await self.run_prune()

    async def _load_watermark_init(self) -> None:
        await self.load_watermark()

    async def _ensure_collection_init(self) -> None:
        await self.ensure_collection()

    def build_jobs(self) -> List[Job]:
        """Jobs por defecto, en orden de registro."""
        return [
            Job(
                id=CREATE_COLLECTION_JOB_NAME,
                init=self._ensure_collection_init,
                side_effect_only=True,
            ),
            Job(
                id=SYNC_JOB_NAME,
                schedule=self.settings.SYNC_SCHEDULE,
                run=self._sync_body,
                init=self._load_watermark_init,
            ),
            Job(
                id=PRUNE_JOB_NAME,
                schedule=self.settings.PRUNE_SCHEDULE,
                run=self._prune_body,
            ),
        ]
