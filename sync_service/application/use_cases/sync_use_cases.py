"""
Caso de uso: sincronizar registros modificados hacia el indice.

Diseño (resumen):
- Captura la hora de inicio del tick antes de consultar
- Lee el watermark (o lo inicializa en epoch / valor del operador)
- Trae registros elegibles con updated_at > watermark (orden ascendente, lote acotado)
- Transforma a documentos y los upsertea tolerando fallos parciales
- Avanza el watermark y sobreescribe el snapshot de exitos/fallos

Regla de avance del cursor:
- Lote incompleto: hora de inicio del tick (no se pierde nada modificado
  durante la entrega).
- Lote lleno: maximo updated_at traido, para que el siguiente tick continue
  con el backlog.
- Nunca retrocede; sin registros traidos no se escribe.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from loguru import logger

from sync_service.application.services.document_transformer import transform_records
from sync_service.application.services.fan_out import BatchOutcome
from sync_service.application.services.upsert_executor import UpsertExecutor
from sync_service.domain.entities.watermark import DEFAULT_BATCH_SIZE, Watermark
from sync_service.domain.repositories.source_repository import ISourceRecordRepository
from sync_service.domain.repositories.sync_state_repository import ISyncStateRepository
from sync_service.shared.exceptions.sync import IndexNotReadyError, SourceUnavailableError
from sync_service.shared.utils.datetime_utils import ensure_utc, utc_now


JOB_NAME = "sync-updated-items"


@dataclass(frozen=True)
class SyncTickResult:
    """Resultado de una corrida del sync."""

    status: str  # "idle" | "completed" | "aborted"
    fetched: int = 0
    documents: int = 0
    synced: Tuple[str, ...] = field(default_factory=tuple)
    failed: Dict[str, str] = field(default_factory=dict)
    watermark: Optional[Watermark] = None

    @property
    def more_pending(self) -> bool:
        """True si el lote se lleno (probable backlog)."""
        return self.watermark is not None and self.fetched >= self.watermark.batch_size


class SyncUpdatedItemsUseCase:
    """
    Orquestador de un tick del sync incremental.
    """

    def __init__(
        self,
        *,
        records: ISourceRecordRepository,
        state: ISyncStateRepository,
        executor: UpsertExecutor,
        watermark_id: int,
        default_batch_size: int = DEFAULT_BATCH_SIZE,
        initial_cursor: Optional[datetime] = None,
        query_timeout_s: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._records = records
        self._state = state
        self._executor = executor
        self._watermark_id = watermark_id
        self._default_batch_size = default_batch_size
        self._initial_cursor = initial_cursor
        self._query_timeout_s = query_timeout_s
        self._clock = clock

    async def load_watermark(self) -> Watermark:
        """Lee el watermark persistido o construye el inicial (sin persistirlo)."""
        watermark = await self._state.read_watermark()
        if watermark is not None:
            return watermark
        return Watermark.initial(
            self._watermark_id,
            initial_cursor=self._initial_cursor,
            batch_size=self._default_batch_size,
        )

    async def execute(self) -> SyncTickResult:
        """
        Ejecuta un tick completo.

        Raises:
            SourceUnavailableError: si la consulta a la base origen falla o
                excede el deadline (el watermark no se toca)
        """
        # Hora de inicio del tick: candidata a proximo last_sync_time
        tick_started_at = ensure_utc(self._clock())

        watermark = await self.load_watermark()

        try:
            records = await asyncio.wait_for(
                self._records.find_changed_eligible_records(
                    since=watermark.last_sync_time, limit=watermark.batch_size
                ),
                timeout=self._query_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise SourceUnavailableError(
                f"Timeout ({self._query_timeout_s}s) consultando registros modificados"
            ) from e

        if not records:
            logger.debug(f"[{JOB_NAME}] No hay items nuevos o actualizados para sincronizar.")
            return SyncTickResult(status="idle", watermark=watermark)

        logger.info(
            f"[{JOB_NAME}] Se encontraron {len(records)} item(s) para sincronizar "
            f"(cursor > {watermark.last_sync_time.isoformat()})."
        )

        docs = transform_records(records)

        if docs:
            try:
                outcome = await self._executor.deliver(docs)
            except IndexNotReadyError:
                logger.error(
                    f"[{JOB_NAME}] Lote abortado: el indice no esta listo. "
                    f"El watermark no avanza; se reintentara el mismo rango."
                )
                return SyncTickResult(status="aborted", fetched=len(records), documents=len(docs), watermark=watermark)
        else:
            outcome = BatchOutcome()

        if len(records) >= watermark.batch_size:
            new_cursor = max(ensure_utc(r.updated_at) for r in records)
        else:
            new_cursor = tick_started_at

        advanced = watermark.advance(new_cursor, synced=outcome.succeeded, failed=outcome.failed_ids)
        persisted = await self._state.write_watermark(advanced)

        logger.info(
            f"[{JOB_NAME}] Sync completado. documentos={len(docs)}, ok={len(outcome.succeeded)}, "
            f"fallidos={len(outcome.failed)}, last_sync_time={persisted.last_sync_time.isoformat()}"
        )
        return SyncTickResult(
            status="completed",
            fetched=len(records),
            documents=len(docs),
            synced=outcome.succeeded,
            failed=dict(outcome.failed),
            watermark=persisted,
        )
