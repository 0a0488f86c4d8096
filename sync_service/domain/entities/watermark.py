"""
Entidad de dominio: Watermark (cursor persistido del sync incremental).
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from sync_service.shared.utils.datetime_utils import EPOCH, ensure_utc


DEFAULT_BATCH_SIZE = 1000


@dataclass(frozen=True)
class Watermark:
    """
    Estado persistido de un pipeline de sync (un unico registro por pipeline).

    last_sync_time:
        frontera entre lo ya intentado y lo pendiente. El poller trae
        registros con mutacion estrictamente mayor a este valor.
    failed_items / synced_items:
        snapshot de la ultima corrida (se sobreescriben, no se acumulan).
    """

    id: int
    last_sync_time: datetime = EPOCH
    batch_size: int = DEFAULT_BATCH_SIZE
    failed_items: Tuple[str, ...] = field(default_factory=tuple)
    synced_items: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size debe ser positivo, recibido: {self.batch_size}")
        object.__setattr__(self, "last_sync_time", ensure_utc(self.last_sync_time))
        object.__setattr__(self, "failed_items", tuple(self.failed_items))
        object.__setattr__(self, "synced_items", tuple(self.synced_items))

    @classmethod
    def initial(
        cls,
        watermark_id: int,
        *,
        initial_cursor: Optional[datetime] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> "Watermark":
        """Watermark para la primera corrida (epoch o el valor del operador)."""
        return cls(
            id=watermark_id,
            last_sync_time=initial_cursor or EPOCH,
            batch_size=batch_size,
        )

    def advance(
        self,
        new_cursor: datetime,
        *,
        synced: Iterable[str] = (),
        failed: Iterable[str] = (),
    ) -> "Watermark":
        """
        Retorna un nuevo watermark con el cursor avanzado y el snapshot reemplazado.

        El cursor nunca retrocede: se toma el maximo entre el actual y el nuevo.
        """
        return replace(
            self,
            last_sync_time=max(self.last_sync_time, ensure_utc(new_cursor)),
            synced_items=tuple(synced),
            failed_items=tuple(failed),
        )
