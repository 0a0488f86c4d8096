"""
Interfaz del repositorio del watermark.
"""
from abc import ABC, abstractmethod
from typing import Optional

from sync_service.domain.entities.watermark import Watermark


class ISyncStateRepository(ABC):
    """Lectura/escritura del registro singleton de estado del sync."""
    
    @abstractmethod
    async def read_watermark(self) -> Optional[Watermark]:
        """
        Obtiene el watermark persistido.
        
        Returns:
            Optional[Watermark]: None si aun no existe (primera corrida)
        """
        pass
    
    @abstractmethod
    async def write_watermark(self, watermark: Watermark) -> Watermark:
        """
        Crea o actualiza el watermark (upsert por id singleton).
        
        Returns:
            Watermark: Estado persistido
        """
        pass
