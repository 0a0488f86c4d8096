"""
Entidad de dominio: descriptor de un job recurrente.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional


JobBody = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class Job:
    """
    Conjunto de capacidades de un job.

    - run: cuerpo periodico (requerido salvo en jobs side-effect-only)
    - init: inicializador opcional, se ejecuta una sola vez al registrar
    - schedule: expresion cron (6 campos con segundos, o 5 campos)
    - side_effect_only: el job solo tiene init y nunca se agenda
    """

    id: str
    schedule: str = ""
    run: Optional[JobBody] = None
    init: Optional[JobBody] = None
    side_effect_only: bool = False

    def __post_init__(self) -> None:
        """Validaciones después de la inicialización."""
        if not self.id:
            raise ValueError("El id del job no puede estar vacío")
        if not self.side_effect_only:
            if self.run is None:
                raise ValueError(f"El job '{self.id}' requiere un cuerpo periodico")
            if not self.schedule.strip():
                raise ValueError(f"El job '{self.id}' requiere un schedule")
