"""
Dobles en memoria de los puertos del dominio.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from sync_service.domain.entities.source_record import SourceRecord
from sync_service.domain.entities.watermark import Watermark
from sync_service.domain.repositories.search_index import ISearchIndexClient, SearchPage
from sync_service.domain.repositories.source_repository import ISourceRecordRepository
from sync_service.domain.repositories.sync_state_repository import ISyncStateRepository
from sync_service.shared.exceptions.sync import SearchIndexError
from sync_service.shared.utils.datetime_utils import EPOCH, ensure_utc


def at(seconds: int) -> datetime:
    """Instante UTC a `seconds` segundos del epoch (legible en asserts)."""
    return EPOCH + timedelta(seconds=seconds)


class FakeSearchIndex(ISearchIndexClient):
    """
    Indice en memoria con fallos inyectables.

    - healthy: resultado del health check
    - fail_upsert_ids / fail_delete_ids: ids que fallan con SearchIndexError
    - slow_ids: ids cuyo upsert/delete tarda `delay_s`
    """

    def __init__(self) -> None:
        self.healthy = True
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.documents: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_upsert_ids: Set[str] = set()
        self.fail_delete_ids: Set[str] = set()
        self.fail_search = False
        self.slow_ids: Set[str] = set()
        self.delay_s = 0.0
        self.upsert_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.search_calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def seed(self, collection: str, *doc_ids: str) -> None:
        docs = self.documents.setdefault(collection, {})
        for doc_id in doc_ids:
            docs[doc_id] = {"id": doc_id}

    async def _maybe_wait(self, doc_id: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if doc_id in self.slow_ids:
                await asyncio.sleep(self.delay_s)
            else:
                await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

    async def health(self) -> bool:
        return self.healthy

    async def collection_exists(self, name: str) -> bool:
        return name in self.collections

    async def create_collection(self, schema: Dict[str, Any]) -> None:
        self.collections[schema["name"]] = schema
        self.documents.setdefault(schema["name"], {})

    async def upsert_document(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        doc_id = document["id"]
        self.upsert_calls.append(doc_id)
        await self._maybe_wait(doc_id)
        if doc_id in self.fail_upsert_ids:
            raise SearchIndexError(f"upsert rechazado: {doc_id}", status_code=400)
        self.documents.setdefault(collection, {})[doc_id] = dict(document)
        return document

    async def delete_document(self, collection: str, document_id: str) -> bool:
        self.delete_calls.append(document_id)
        await self._maybe_wait(document_id)
        if document_id in self.fail_delete_ids:
            raise SearchIndexError(f"delete rechazado: {document_id}", status_code=500)
        return self.documents.get(collection, {}).pop(document_id, None) is not None

    async def search(
        self,
        collection: str,
        *,
        q: str,
        query_by: Sequence[str],
        page: int = 1,
        per_page: int = 250,
    ) -> SearchPage:
        self.search_calls.append({"q": q, "query_by": list(query_by), "page": page, "per_page": per_page})
        if self.fail_search:
            raise SearchIndexError("search fallo", status_code=503)
        docs = list(self.documents.get(collection, {}).values())
        start = (page - 1) * per_page
        return SearchPage(hits=docs[start:start + per_page], found=len(docs))


class InMemorySourceRepository(ISourceRecordRepository):
    """
    Origen en memoria con la misma semantica que el repositorio SQL:
    updated_at > since, orden (updated_at, id), lote acotado, sin completar empates.
    """

    def __init__(self, records: Iterable[SourceRecord] = (), eligible: Sequence[str] = ("published",)) -> None:
        self.records: List[SourceRecord] = list(records)
        self.eligible = set(eligible)
        self.calls: List[Dict[str, Any]] = []
        self.delay_s = 0.0

    async def find_changed_eligible_records(self, since: datetime, limit: int) -> List[SourceRecord]:
        self.calls.append({"since": ensure_utc(since), "limit": limit})
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        changed = [
            r for r in self.records
            if r.status in self.eligible and ensure_utc(r.updated_at) > ensure_utc(since)
        ]
        changed.sort(key=lambda r: (r.updated_at, r.id))
        return changed[:limit]

    async def find_eligible_document_ids(self, candidate_ids: Iterable[str]) -> Set[str]:
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        live = {
            str(t.id)
            for r in self.records if r.status in self.eligible
            for t in r.translations
        }
        return {str(i) for i in candidate_ids if str(i) in live}


class InMemorySyncStateRepository(ISyncStateRepository):
    """Watermark en memoria; cuenta las escrituras."""

    def __init__(self, watermark: Optional[Watermark] = None) -> None:
        self.watermark = watermark
        self.writes: List[Watermark] = []

    async def read_watermark(self) -> Optional[Watermark]:
        return self.watermark

    async def write_watermark(self, watermark: Watermark) -> Watermark:
        self.watermark = watermark
        self.writes.append(watermark)
        return watermark


