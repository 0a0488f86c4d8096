"""
Integracion con Typesense (cliente REST minimo, sin SDK).
"""
from sync_service.infrastructure.external.typesense.client import TypesenseClient, TypesenseCredentials
from sync_service.infrastructure.external.typesense.schema import build_collection_schema


__all__ = ["TypesenseClient", "TypesenseCredentials", "build_collection_schema"]
