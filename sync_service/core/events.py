"""
Manejadores de inicio y cierre del servicio.
"""
import sys
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from sync_service.core.config import Settings, settings as default_settings
from sync_service.core.jobs import SyncJobFactory
from sync_service.infrastructure.database.session import AsyncSessionLocal, check_db_connection, close_db, init_db
from sync_service.infrastructure.external.typesense.client import TypesenseClient, TypesenseCredentials
from sync_service.infrastructure.scheduler.job_scheduler import JobScheduler
from sync_service.shared.exceptions.sync import SourceUnavailableError


@dataclass
class ServiceContext:
    """Recursos vivos del servicio entre startup y shutdown."""

    index: TypesenseClient
    scheduler: JobScheduler
    factory: SyncJobFactory


def configure_logging(settings: Settings = default_settings) -> None:
    """
    Configura los sinks de loguru: stderr y archivo rotado.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression="zip",
            level=settings.LOG_LEVEL,
            enqueue=True,
        )


def _validate_config(settings: Settings) -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.TYPESENSE_API_KEY:
        warnings.append("TYPESENSE_API_KEY no configurada - Typesense rechazara las peticiones")

    if not settings.eligible_statuses:
        warnings.append("SYNC_ELIGIBLE_STATUSES vacio - ningun registro sera indexado")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def build_index_client(settings: Settings = default_settings) -> TypesenseClient:
    return TypesenseClient(
        TypesenseCredentials(base_url=settings.typesense_base_url, api_key=settings.TYPESENSE_API_KEY),
        connection_timeout_s=settings.TYPESENSE_CONNECTION_TIMEOUT_S,
        request_timeout_s=settings.INDEX_REQUEST_TIMEOUT_S,
    )


async def startup(settings: Settings = default_settings) -> ServiceContext:
    """
    Inicializa recursos, registra los jobs y arranca el scheduler.

    Raises:
        SourceUnavailableError: si la base de datos no responde
    """
    logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Entorno: {settings.ENVIRONMENT}")

    _validate_config(settings)

    try:
        await check_db_connection()
    except Exception as e:
        raise SourceUnavailableError(f"No se pudo conectar a la base de datos: {e}") from e

    await init_db()
    logger.info("Base de datos inicializada")

    index = build_index_client(settings)
    factory = SyncJobFactory(settings, index, AsyncSessionLocal)
    scheduler = JobScheduler(timezone=settings.SCHEDULER_TIMEZONE)

    for job in factory.build_jobs():
        await scheduler.register(job)

    scheduler.start()
    logger.success("Servicio iniciado correctamente")

    return ServiceContext(index=index, scheduler=scheduler, factory=factory)


async def shutdown(context: Optional[ServiceContext]) -> None:
    """Libera recursos al cerrar el servicio."""
    logger.info("Cerrando servicio...")

    if context is not None:
        await context.scheduler.shutdown()
        await context.index.aclose()
        logger.info("Cliente de Typesense cerrado")

    await close_db()
    logger.info("Conexiones de base de datos cerradas")

    logger.success("Servicio cerrado correctamente")
