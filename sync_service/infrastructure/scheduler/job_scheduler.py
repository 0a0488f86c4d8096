"""
Scheduler de jobs independientes.

Caracteristicas:
- Inicializador de cada job ejecutado una sola vez al registrar; si falla,
  el job queda deshabilitado y los demas siguen registrandose
- Un timer cron por job (APScheduler AsyncIOScheduler)
- No reentrante: si un tick sigue en curso cuando llega el siguiente, el
  nuevo se omite (se registra y se cuenta), nunca se encola
- Aislamiento de errores: la excepcion de un job se loguea con su id y hora
  de disparo, y no detiene su timer ni afecta a otros jobs

Estados por job:
    unregistered -> initializing -> idle <-> running -> stopped
    initializing -(fallo)-> disabled
"""
import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, Dict, List, Optional

from apscheduler.events import EVENT_JOB_MAX_INSTANCES, EVENT_JOB_SUBMITTED, JobSubmissionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from sync_service.domain.entities.job import Job
from sync_service.infrastructure.scheduler.triggers import build_cron_trigger
from sync_service.shared.exceptions.sync import JobInitializationError, JobNotFoundError
from sync_service.shared.utils.datetime_utils import ensure_utc, utc_now


class JobState(str, Enum):
    UNREGISTERED = "unregistered"
    INITIALIZING = "initializing"
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    DISABLED = "disabled"


@dataclass
class JobRuntime:
    """Estado en memoria de un job registrado."""

    job: Job
    state: JobState = JobState.UNREGISTERED
    trigger: Optional[CronTrigger] = None
    running: bool = False
    runs: int = 0
    skipped: int = 0
    failures: int = 0
    last_error: Optional[str] = None
    last_fire_time: Optional[datetime] = None
    history: List[str] = field(default_factory=list)
    # Horas programadas de disparos entregados por APScheduler, aun no ejecutados
    pending_fire_times: Deque[datetime] = field(default_factory=deque)

    def transition(self, state: JobState) -> None:
        self.state = state
        self.history.append(state.value)


class JobScheduler:
    """
    Gestor de N jobs recurrentes sin estado compartido entre ellos.
    """

    def __init__(self, timezone: str = "UTC", scheduler: Optional[AsyncIOScheduler] = None) -> None:
        self._timezone = timezone
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone)
        self._jobs: Dict[str, JobRuntime] = {}
        self._scheduler.add_listener(self._on_max_instances, EVENT_JOB_MAX_INSTANCES)
        self._scheduler.add_listener(self._on_job_submitted, EVENT_JOB_SUBMITTED)

    @property
    def job_ids(self) -> List[str]:
        return list(self._jobs.keys())

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def get_stats(self, job_id: str) -> JobRuntime:
        """
        Raises:
            JobNotFoundError: si el job no fue registrado
        """
        runtime = self._jobs.get(job_id)
        if runtime is None:
            raise JobNotFoundError(job_id)
        return runtime

    async def register(self, job: Job) -> bool:
        """
        Registra un job y ejecuta su inicializador (una sola vez).

        Returns:
            bool: False si el job quedo deshabilitado
        """
        if job.id in self._jobs:
            logger.warning(f"Job {job.id} ya estaba registrado; se ignora el duplicado.")
            return False

        runtime = JobRuntime(job=job)
        self._jobs[job.id] = runtime
        runtime.transition(JobState.INITIALIZING)

        try:
            if not job.side_effect_only:
                runtime.trigger = build_cron_trigger(job.schedule, self._timezone)
            if job.init is not None:
                await job.init()
        except Exception as e:
            error = JobInitializationError(job.id, str(e))
            runtime.last_error = error.message
            runtime.transition(JobState.DISABLED)
            logger.exception(f"Job {job.id} deshabilitado: {error.message}")
            return False

        if job.side_effect_only:
            # Solo tenia efecto de inicializacion; nunca se agenda
            runtime.transition(JobState.STOPPED)
            logger.info(f"Job {job.id} (side-effect) ejecutado.")
        else:
            runtime.transition(JobState.IDLE)
            logger.info(f"Job {job.id} registrado con schedule '{job.schedule}'.")
        return True

    def start(self) -> None:
        """
        Agenda todos los jobs en estado idle y arranca el scheduler.
        Debe llamarse con un event loop corriendo.
        """
        for runtime in self._jobs.values():
            if runtime.state != JobState.IDLE or self._scheduler.get_job(runtime.job.id):
                continue
            self._scheduler.add_job(
                self._fire,
                trigger=runtime.trigger,
                args=[runtime.job.id],
                id=runtime.job.id,
                name=runtime.job.id,
                # El guard propio decide; APScheduler solo debe entregar el disparo
                max_instances=2,
                coalesce=True,
                replace_existing=True,
            )

        if not self._scheduler.running:
            self._scheduler.start()

        jobs = self._scheduler.get_jobs()
        logger.info(f"Scheduler iniciado con {len(jobs)} job(s)")
        for job in jobs:
            logger.debug(f"  - {job.name} (proxima corrida: {getattr(job, 'next_run_time', None)})")

    def stop(self, job_id: str) -> None:
        """
        Cancela el timer de un job. Idempotente.
        Una corrida en vuelo termina normalmente.
        """
        runtime = self._jobs.get(job_id)
        if runtime is None:
            logger.warning(f"Job {job_id} no registrado; nada que detener.")
            return

        if self._scheduler.get_job(job_id):
            self._scheduler.remove_job(job_id)

        if runtime.state in (JobState.IDLE, JobState.RUNNING):
            runtime.transition(JobState.STOPPED)
            logger.info(f"Job detenido: {job_id}")

    async def shutdown(self, timeout_s: float = 30.0) -> bool:
        """
        Detiene todos los timers, espera las corridas en vuelo y luego apaga
        APScheduler (su executor cancela las tareas que sigan pendientes).

        Returns:
            bool: False si alguna corrida no termino dentro del timeout
        """
        for job_id in list(self._jobs):
            self.stop(job_id)
        drained = await self.drain(timeout_s)
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("Scheduler detenido")
        return drained

    async def drain(self, timeout_s: float = 30.0) -> bool:
        """
        Espera a que terminen las corridas en vuelo.

        Returns:
            bool: False si se agoto el timeout con corridas pendientes
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_s
        while any(runtime.running for runtime in self._jobs.values()):
            if loop.time() >= deadline:
                pending = [job_id for job_id, runtime in self._jobs.items() if runtime.running]
                logger.warning(f"Timeout esperando corridas en vuelo: {pending}")
                return False
            await asyncio.sleep(0.05)
        return True

    async def run_once(self, job_id: str) -> bool:
        """
        Ejecucion manual (p.ej. re-sync administrativo).
        Comparte el guard de no-reentrancia con los disparos agendados.

        Returns:
            bool: False si se omitio (corrida en curso, job deshabilitado o sin cuerpo)
        """
        runtime = self.get_stats(job_id)
        if runtime.state == JobState.DISABLED or runtime.job.run is None:
            logger.warning(f"Job {job_id} no ejecutable manualmente (estado: {runtime.state.value}).")
            return False
        return await self._execute(runtime, utc_now())

    async def _fire(self, job_id: str) -> None:
        runtime = self._jobs.get(job_id)
        if runtime is None:
            return
        if runtime.pending_fire_times:
            fire_time = runtime.pending_fire_times.popleft()
        else:
            fire_time = utc_now()
        await self._execute(runtime, fire_time)

    async def _execute(self, runtime: JobRuntime, fire_time: datetime) -> bool:
        job_id = runtime.job.id

        if runtime.running:
            runtime.skipped += 1
            logger.warning(
                f"Job {job_id}: disparo de {fire_time.isoformat()} omitido, "
                f"la corrida anterior sigue en curso."
            )
            return False

        runtime.running = True
        runtime.last_fire_time = fire_time
        if runtime.state == JobState.IDLE:
            runtime.transition(JobState.RUNNING)

        try:
            await runtime.job.run()
            runtime.runs += 1
            logger.debug(f"{job_id} ejecutado ({fire_time.isoformat()})")
        except Exception as e:
            runtime.failures += 1
            runtime.last_error = str(e)
            logger.exception(f"Error ejecutando job: {job_id} a las {fire_time.isoformat()}: {e}")
        finally:
            runtime.running = False
            if runtime.state == JobState.RUNNING:
                runtime.transition(JobState.IDLE)

        return True

    def _on_job_submitted(self, event: JobSubmissionEvent) -> None:
        runtime = self._jobs.get(event.job_id)
        if runtime is None or not event.scheduled_run_times:
            return
        runtime.pending_fire_times.append(ensure_utc(event.scheduled_run_times[-1]))

    def _on_max_instances(self, event: JobSubmissionEvent) -> None:
        runtime = self._jobs.get(event.job_id)
        if runtime is None:
            return
        runtime.skipped += 1
        logger.warning(f"Job {event.job_id}: disparo omitido por APScheduler (instancias maximas).")
