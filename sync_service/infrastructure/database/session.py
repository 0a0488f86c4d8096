"""
Gestión de sesiones de base de datos.
"""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from sync_service.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args() -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }
    
    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in settings.effective_database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })
    
    return args


# Engine de base de datos
engine = create_async_engine(settings.effective_database_url, **_create_engine_args())

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def check_db_connection() -> None:
    """Verifica que la base responda (SELECT 1). Propaga el error si no."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def init_db() -> None:
    """
    Crea las tablas propias del servicio si no existen.

    Solo `sync_service`: `video` y `video_translations` pertenecen al CMS.
    """
    from sync_service.infrastructure.database.models import SyncServiceModel

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=[SyncServiceModel.__table__])


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
