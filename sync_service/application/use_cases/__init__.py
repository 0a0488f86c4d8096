"""
Casos de uso de los jobs del servicio.
"""
from sync_service.application.use_cases.collection_use_cases import EnsureCollectionUseCase
from sync_service.application.use_cases.prune_use_cases import PruneRemovedItemsUseCase, PruneResult
from sync_service.application.use_cases.sync_use_cases import SyncTickResult, SyncUpdatedItemsUseCase


__all__ = [
    "EnsureCollectionUseCase",
    "PruneRemovedItemsUseCase",
    "PruneResult",
    "SyncTickResult",
    "SyncUpdatedItemsUseCase",
]
