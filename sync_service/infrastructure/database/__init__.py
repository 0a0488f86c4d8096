"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from sync_service.infrastructure.database.models import (
    SyncServiceModel,
    VideoModel,
    VideoTranslationModel,
)
