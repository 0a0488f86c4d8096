"""
Contratos de los colaboradores externos (base origen e indice).
"""
from sync_service.domain.repositories.search_index import ISearchIndexClient, SearchPage
from sync_service.domain.repositories.source_repository import ISourceRecordRepository
from sync_service.domain.repositories.sync_state_repository import ISyncStateRepository


__all__ = [
    "ISearchIndexClient",
    "ISourceRecordRepository",
    "ISyncStateRepository",
    "SearchPage",
]
