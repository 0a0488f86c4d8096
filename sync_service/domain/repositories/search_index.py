"""
Interfaz del cliente del servicio de indice de busqueda.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence


@dataclass(frozen=True)
class SearchPage:
    """Pagina de resultados de una busqueda."""

    hits: List[Dict[str, Any]] = field(default_factory=list)
    # Total de documentos que coinciden (todas las paginas)
    found: int = 0

    @property
    def document_ids(self) -> List[str]:
        return [str(hit["id"]) for hit in self.hits if "id" in hit]


class ISearchIndexClient(ABC):
    """
    Contrato con el servicio de indice.
    Los errores de operacion se reportan con SearchIndexError.
    """

    @abstractmethod
    async def health(self) -> bool:
        """True si el servicio esta listo para recibir escrituras."""
        pass

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    async def create_collection(self, schema: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def upsert_document(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def delete_document(self, collection: str, document_id: str) -> bool:
        """
        Elimina un documento.

        Returns:
            bool: False si el documento ya no existia
        """
        pass

    @abstractmethod
    async def search(
        self,
        collection: str,
        *,
        q: str,
        query_by: Sequence[str],
        page: int = 1,
        per_page: int = 250,
    ) -> SearchPage:
        pass
