"""
Entidades de dominio: registro origen (video) y sus sub-registros por idioma.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class SourceTranslation:
    """Traduccion de un video (un documento del indice por traduccion)."""

    id: int
    languages_code: str
    title: Optional[str] = None
    slug: Optional[str] = None
    keywords: Any = None


@dataclass(frozen=True)
class SourceRecord:
    """
    Registro padre del sistema origen.

    El servicio solo lo lee: nunca lo crea ni lo borra.
    """

    id: int
    status: str
    updated_at: datetime
    translations: Tuple[SourceTranslation, ...] = field(default_factory=tuple)
