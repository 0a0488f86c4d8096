"""
Entrega de un lote de documentos al indice tolerando fallos parciales.
"""
import asyncio
from typing import Dict, Sequence

from loguru import logger

from sync_service.application.services.fan_out import BatchOutcome, fan_out
from sync_service.domain.entities.index_document import IndexDocument
from sync_service.domain.repositories.search_index import ISearchIndexClient
from sync_service.shared.exceptions.sync import IndexNotReadyError


class UpsertExecutor:
    """
    Upsert concurrente (acotado) de documentos en una coleccion.

    - Precondicion: health check; si el indice no esta listo se aborta el
      lote completo con IndexNotReadyError (ningun intento parcial).
    - Cada documento se upsertea de forma independiente por su id.
    - No reintenta dentro de la misma corrida.
    """

    def __init__(
        self,
        index: ISearchIndexClient,
        collection: str,
        *,
        max_concurrency: int = 16,
        request_timeout_s: float = 10.0,
    ) -> None:
        self._index = index
        self._collection = collection
        self._max_concurrency = max_concurrency
        self._request_timeout_s = request_timeout_s

    async def ensure_ready(self) -> None:
        """
        Verifica el health del indice.

        Raises:
            IndexNotReadyError: si el indice responde "no listo" o no responde
        """
        try:
            ready = await asyncio.wait_for(self._index.health(), timeout=self._request_timeout_s)
        except Exception as e:
            logger.error(f"Health check de Typesense fallo: {e}")
            ready = False

        if not ready:
            logger.error("Typesense no esta listo.")
            raise IndexNotReadyError()

    async def deliver(self, documents: Sequence[IndexDocument]) -> BatchOutcome:
        """
        Upsertea el lote y retorna el detalle de exitos/fallos.
        
        Args:
            documents: Documentos a entregar (ids unicos)
            
        Returns:
            BatchOutcome: ids exitosos y fallidos con su motivo
        """
        logger.debug(f"Total de documentos en cola: {len(documents)}")

        await self.ensure_ready()

        by_id: Dict[str, IndexDocument] = {doc.id: doc for doc in documents}

        async def _upsert(doc_id: str):
            return await self._index.upsert_document(self._collection, by_id[doc_id].to_payload())

        outcome = await fan_out(
            by_id.keys(),
            _upsert,
            max_concurrency=self._max_concurrency,
            timeout_s=self._request_timeout_s,
            label="upsert",
        )

        if outcome.failed:
            logger.error(f"{len(outcome.failed)} documento(s) fallaron en el upsert")

        return outcome
