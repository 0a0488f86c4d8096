from sync_service.infrastructure.repositories.source_repository_impl import SourceRecordRepository
from sync_service.infrastructure.repositories.sync_state_repository_impl import SyncStateRepository


__all__ = ["SourceRecordRepository", "SyncStateRepository"]
