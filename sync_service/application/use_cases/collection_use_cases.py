"""
Caso de uso: asegurar que la coleccion destino exista.
"""
from typing import Any, Dict

from loguru import logger

from sync_service.domain.repositories.search_index import ISearchIndexClient


class EnsureCollectionUseCase:
    """
    Crea la coleccion si no existe. Si ya existe no hace nada: nunca
    modifica un esquema existente.
    """

    def __init__(self, index: ISearchIndexClient, schema: Dict[str, Any]) -> None:
        self._index = index
        self._schema = schema

    @property
    def collection(self) -> str:
        return self._schema["name"]

    async def execute(self) -> bool:
        """
        Returns:
            bool: True si la coleccion fue creada en esta llamada
        """
        if await self._index.collection_exists(self.collection):
            logger.debug(f"Coleccion {self.collection} ya existe.")
            return False

        logger.info(f"Coleccion {self.collection} no existe. Creando...")
        await self._index.create_collection(self._schema)
        logger.info(f"Coleccion {self.collection} creada.")
        return True
