"""
Interfaz del repositorio de registros origen.
Define el contrato de lectura sobre el sistema de registro.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Set

from sync_service.domain.entities.source_record import SourceRecord


class ISourceRecordRepository(ABC):
    """
    Interfaz de lectura del sistema origen.
    El servicio nunca crea ni borra registros origen.
    """
    
    @abstractmethod
    async def find_changed_eligible_records(
        self, since: datetime, limit: int
    ) -> List[SourceRecord]:
        """
        Obtiene registros elegibles modificados despues de `since`.
        
        Args:
            since: Watermark actual (comparacion estricta `>`)
            limit: Tamaño de lote
            
        Returns:
            List[SourceRecord]: Ordenados por (updated_at, id) ascendente.
            Si el lote se llena, incluye el resto de registros que comparten
            el ultimo timestamp para no partir un grupo de empates.
        """
        pass
    
    @abstractmethod
    async def find_eligible_document_ids(self, candidate_ids: Iterable[str]) -> Set[str]:
        """
        Filtra los ids de documento que siguen siendo elegibles.
        
        Args:
            candidate_ids: Ids presentes en el indice
            
        Returns:
            Set[str]: Subconjunto de ids con registro origen elegible
        """
        pass
