"""
Entidad de dominio: documento plano enviado al indice de busqueda.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class IndexDocument:
    """
    Proyeccion plana de una traduccion.

    `id` es determinista (id de la traduccion), por lo que reenviar el mismo
    documento sobreescribe en vez de duplicar.
    """

    id: str
    video_id: str
    lang: str
    title: str
    slug: str
    updated_at: int
    keywords: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Serializa al formato de documento de Typesense."""
        return {
            "id": self.id,
            "video_id": self.video_id,
            "lang": self.lang,
            "title": self.title,
            "slug": self.slug,
            "keywords": list(self.keywords),
            "updated_at": self.updated_at,
        }
