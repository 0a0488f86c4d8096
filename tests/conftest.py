"""
Configuración de fixtures para pytest.
"""
import os
from typing import AsyncGenerator

# Antes de importar la configuracion: nunca apuntar a la base real en tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sync_service.infrastructure.database.session import Base
from tests.fakes import FakeSearchIndex


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Fabrica de sesiones sobre una base SQLite en memoria compartida
    (StaticPool: todas las sesiones ven la misma conexion).
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sesion de base de datos para tests de repositorios."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_index() -> FakeSearchIndex:
    return FakeSearchIndex()
