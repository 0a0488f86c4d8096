"""
Caso de uso: reconciliar el indice con el sistema origen (prune).

Estrategia:
- Lista ids del indice con una busqueda match-all paginada (acotada)
- Consulta en la base cuales siguen siendo elegibles
- Elimina el resto de forma concurrente; los fallos se registran por id

Es stateless entre corridas: un borrado fallido se reintenta en el
siguiente ciclo. Nunca toca el watermark del sync.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from sync_service.application.services.fan_out import fan_out
from sync_service.domain.repositories.search_index import ISearchIndexClient
from sync_service.domain.repositories.source_repository import ISourceRecordRepository
from sync_service.shared.exceptions.sync import SourceUnavailableError


JOB_NAME = "prune-removed-items"

DEFAULT_QUERY_BY = ("title", "keywords", "slug")


@dataclass(frozen=True)
class PruneResult:
    """Resultado de un ciclo de reconciliacion."""

    status: str  # "completed" | "aborted"
    scanned: int = 0
    pruned: Tuple[str, ...] = field(default_factory=tuple)
    failed: Dict[str, str] = field(default_factory=dict)


class PruneRemovedItemsUseCase:
    """
    Elimina del indice los documentos sin registro origen elegible.
    """

    def __init__(
        self,
        *,
        records: ISourceRecordRepository,
        index: ISearchIndexClient,
        collection: str,
        page_size: int = 250,
        max_pages: int = 20,
        query_by: Sequence[str] = DEFAULT_QUERY_BY,
        max_concurrency: int = 16,
        request_timeout_s: float = 10.0,
        query_timeout_s: float = 30.0,
    ) -> None:
        self._records = records
        self._index = index
        self._collection = collection
        self._page_size = page_size
        self._max_pages = max_pages
        self._query_by = list(query_by)
        self._max_concurrency = max_concurrency
        self._request_timeout_s = request_timeout_s
        self._query_timeout_s = query_timeout_s

    async def _list_indexed_ids(self) -> List[str]:
        """Recorre las paginas match-all hasta agotar `found`, una pagina corta o el maximo."""
        ids: List[str] = []
        seen = set()
        for page in range(1, self._max_pages + 1):
            result = await asyncio.wait_for(
                self._index.search(
                    self._collection,
                    q="*",
                    query_by=self._query_by,
                    page=page,
                    per_page=self._page_size,
                ),
                timeout=self._request_timeout_s,
            )
            for doc_id in result.document_ids:
                if doc_id not in seen:
                    seen.add(doc_id)
                    ids.append(doc_id)
            # Pagina corta o total alcanzado: no hay mas resultados
            if len(result.hits) < self._page_size or page * self._page_size >= result.found:
                break
        return ids

    async def execute(self) -> PruneResult:
        """Ejecuta un ciclo de reconciliacion."""
        try:
            doc_ids = await self._list_indexed_ids()
        except Exception as e:
            logger.error(f"[{JOB_NAME}] Error obteniendo documentos de Typesense: {e}")
            return PruneResult(status="aborted")

        if not doc_ids:
            logger.debug(f"[{JOB_NAME}] El indice no tiene documentos.")
            return PruneResult(status="completed")

        try:
            eligible = await asyncio.wait_for(
                self._records.find_eligible_document_ids(doc_ids),
                timeout=self._query_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise SourceUnavailableError(
                f"Timeout ({self._query_timeout_s}s) verificando elegibilidad"
            ) from e

        to_prune = [doc_id for doc_id in doc_ids if doc_id not in eligible]

        if not to_prune:
            logger.info(f"[{JOB_NAME}] No hay items para eliminar ({len(doc_ids)} revisados).")
            return PruneResult(status="completed", scanned=len(doc_ids))

        logger.info(f"[{JOB_NAME}] Se encontraron {len(to_prune)} item(s) para eliminar.")

        async def _delete(doc_id: str):
            return await self._index.delete_document(self._collection, doc_id)

        outcome = await fan_out(
            to_prune,
            _delete,
            max_concurrency=self._max_concurrency,
            timeout_s=self._request_timeout_s,
            label="prune",
        )

        if outcome.failed:
            logger.error(f"[{JOB_NAME}] {len(outcome.failed)} documento(s) no se pudieron eliminar.")

        return PruneResult(
            status="completed",
            scanned=len(doc_ids),
            pruned=outcome.succeeded,
            failed=dict(outcome.failed),
        )
