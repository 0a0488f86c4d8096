"""
Fan-out concurrente y acotado de operaciones por item.

Cada item termina en exito o fallo; un fallo nunca aborta a sus hermanos.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Tuple

from loguru import logger


@dataclass(frozen=True)
class BatchOutcome:
    """Resultado de un fan-out: ids exitosos y fallidos (id -> motivo)."""

    succeeded: Tuple[str, ...] = field(default_factory=tuple)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def failed_ids(self) -> Tuple[str, ...]:
        return tuple(self.failed.keys())

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)


async def fan_out(
    item_ids: Iterable[str],
    operation: Callable[[str], Awaitable[object]],
    *,
    max_concurrency: int,
    timeout_s: float,
    label: str,
) -> BatchOutcome:
    """
    Ejecuta `operation(item_id)` para cada id, con a lo sumo `max_concurrency`
    llamadas en vuelo y un deadline por llamada.

    El orden de `succeeded` sigue el orden de entrada (no el de finalizacion).
    """
    ids: List[str] = list(item_ids)
    semaphore = asyncio.Semaphore(max_concurrency)
    failed: Dict[str, str] = {}

    async def _run_one(item_id: str) -> None:
        async with semaphore:
            try:
                await asyncio.wait_for(operation(item_id), timeout=timeout_s)
            except asyncio.TimeoutError:
                failed[item_id] = f"timeout tras {timeout_s}s"
            except Exception as e:
                failed[item_id] = str(e) or e.__class__.__name__

            if item_id in failed:
                logger.error(f"[{label}] Fallo en documento {item_id}: {failed[item_id]}")

    await asyncio.gather(*(_run_one(item_id) for item_id in ids))

    succeeded = tuple(item_id for item_id in ids if item_id not in failed)
    ordered_failed = {item_id: failed[item_id] for item_id in ids if item_id in failed}
    return BatchOutcome(succeeded=succeeded, failed=ordered_failed)
