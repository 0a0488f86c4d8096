"""
Repositorio para el registro de estado del sync (watermark).
"""
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from sync_service.domain.entities.watermark import Watermark
from sync_service.domain.repositories.sync_state_repository import ISyncStateRepository
from sync_service.infrastructure.database.models import SyncServiceModel
from sync_service.shared.utils.datetime_utils import ensure_utc


def _split_ids(raw: Optional[str]) -> Tuple[str, ...]:
    return tuple(i for i in (raw or "").split(",") if i)


class SyncStateRepository(ISyncStateRepository):
    """
    Gestiona la tabla sync_service (un registro por pipeline).
    El caller controla el commit.
    """
    
    def __init__(self, db: AsyncSession, watermark_id: int = 1):
        self.db = db
        self.watermark_id = watermark_id

    async def read_watermark(self) -> Optional[Watermark]:
        """
        Obtiene el watermark del pipeline o None si aun no existe.
        """
        model = await self.db.get(SyncServiceModel, self.watermark_id)
        return self._to_entity(model) if model else None

    async def write_watermark(self, watermark: Watermark) -> Watermark:
        """
        Crea o actualiza el watermark.
        """
        existing = await self.db.get(SyncServiceModel, watermark.id)
        
        if existing:
            existing.last_sync_time = watermark.last_sync_time
            existing.batch_size = watermark.batch_size
            existing.failed_items = ",".join(watermark.failed_items)
            existing.synced_items = ",".join(watermark.synced_items)
            model = existing
        else:
            model = SyncServiceModel(
                id=watermark.id,
                last_sync_time=watermark.last_sync_time,
                batch_size=watermark.batch_size,
                failed_items=",".join(watermark.failed_items),
                synced_items=",".join(watermark.synced_items),
            )
            self.db.add(model)
            logger.info(f"Registro sync_service {watermark.id} creado.")
        
        await self.db.flush()
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: SyncServiceModel) -> Watermark:
        return Watermark(
            id=model.id,
            last_sync_time=ensure_utc(model.last_sync_time),
            batch_size=model.batch_size or 1000,
            failed_items=_split_ids(model.failed_items),
            synced_items=_split_ids(model.synced_items),
        )
