"""
Configuracion central del servicio.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
from datetime import datetime
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion del servicio.
    Lee variables de entorno y proporciona valores por defecto.
    
    - DATABASE_URL se puede especificar completa o por componentes
    - Los schedules aceptan cron de 6 campos (con segundos) o de 5 campos
    - SYNC_ELIGIBLE_STATUSES es una lista separada por comas
    """
    
    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="sync-service")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")
    
    # Base de datos - Componentes separados (recomendado para flexibilidad)
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="directus")
    DATABASE_PASSWORD: str = Field(default="directus")
    DATABASE_NAME: str = Field(default="directus")
    
    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)
    # Deadline de cada consulta a la base origen (segundos)
    SOURCE_QUERY_TIMEOUT_S: float = Field(default=30.0, gt=0)
    
    # Typesense
    TYPESENSE_HOST: str = Field(default="localhost")
    TYPESENSE_PORT: int = Field(default=8108)
    TYPESENSE_PROTOCOL: str = Field(default="http")
    TYPESENSE_API_KEY: str = Field(default="")
    TYPESENSE_CONNECTION_TIMEOUT_S: float = Field(default=4.0, gt=0)
    
    # Indice destino
    INDEX_COLLECTION: str = Field(default="videos")
    INDEX_MAX_CONCURRENCY: int = Field(default=16, ge=1)
    INDEX_REQUEST_TIMEOUT_S: float = Field(default=10.0, gt=0)
    
    # Scheduler
    SYNC_SCHEDULE: str = Field(default="*/25 * * * * *")
    PRUNE_SCHEDULE: str = Field(default="*/30 * * * * *")
    SCHEDULER_TIMEZONE: str = Field(default="Asia/Ho_Chi_Minh")
    
    # Sync incremental
    SYNC_STATE_ID: int = Field(default=1)
    SYNC_BATCH_SIZE: int = Field(default=1000, ge=1)
    SYNC_INITIAL_CURSOR: Optional[datetime] = Field(default=None)
    SYNC_ELIGIBLE_STATUSES: str = Field(default="published")
    
    # Prune (Typesense limita per_page a 250)
    PRUNE_PAGE_SIZE: int = Field(default=250, ge=1, le=250)
    PRUNE_MAX_PAGES: int = Field(default=20, ge=1)
    
    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/sync-service.log")
    LOG_ROTATION: str = Field(default="20 MB")
    LOG_RETENTION: str = Field(default="14 days")
    
    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )
    
    @computed_field
    @property
    def typesense_base_url(self) -> str:
        """URL base del nodo Typesense."""
        return f"{self.TYPESENSE_PROTOCOL}://{self.TYPESENSE_HOST}:{self.TYPESENSE_PORT}"
    
    @computed_field
    @property
    def eligible_statuses(self) -> List[str]:
        """Estados de ciclo de vida que habilitan la indexacion."""
        return parse_status_list(self.SYNC_ELIGIBLE_STATUSES)
    
    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"
    
    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def parse_status_list(raw: str) -> List[str]:
    """
    Parsea una lista de estados separada por comas.
    Ignora espacios y entradas vacias.
    """
    return [status.strip() for status in raw.split(",") if status.strip()]


# Instancia global de configuracion
settings = Settings()
