"""
Esquema de la coleccion de videos.

Este modulo no realiza I/O: solo define configuracion.
"""
from typing import Any, Dict


def build_collection_schema(name: str) -> Dict[str, Any]:
    """
    Esquema esperado de la coleccion (un documento por traduccion).

    `updated_at` es el campo de orden por defecto (epoch en segundos).
    """
    return {
        "name": name,
        "fields": [
            {"name": "video_id", "type": "string"},
            {"name": "lang", "type": "string", "facet": True},
            {"name": "title", "type": "string"},
            {"name": "slug", "type": "string"},
            {"name": "keywords", "type": "string[]", "optional": True},
            {"name": "updated_at", "type": "int64"},
        ],
        "default_sorting_field": "updated_at",
    }
