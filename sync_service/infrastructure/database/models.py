"""
Modelos de base de datos (ORM).

`video` y `video_translations` son del sistema origen (solo lectura);
`sync_service` guarda el watermark del pipeline.
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from sync_service.infrastructure.database.session import Base


class VideoModel(Base):
    """Registro padre del CMS."""
    
    __tablename__ = "video"
    
    id = Column(Integer, primary_key=True, index=True)
    status = Column(String(64), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, index=True)
    
    translations = relationship(
        "VideoTranslationModel",
        back_populates="video",
        order_by="VideoTranslationModel.id",
        lazy="selectin",
    )
    
    def __repr__(self):
        return f"<Video(id={self.id}, status={self.status}, updated_at={self.updated_at})>"


class VideoTranslationModel(Base):
    """Traduccion por idioma de un video (un documento por fila)."""
    
    __tablename__ = "video_translations"
    
    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("video.id", ondelete="CASCADE"), nullable=False, index=True)
    languages_code = Column(String(32), nullable=False)
    title = Column(String(512), nullable=True)
    slug = Column(String(512), nullable=True)
    keywords = Column(JSON, nullable=True)  # Lista de strings (o texto separado por comas en filas antiguas)
    
    video = relationship("VideoModel", back_populates="translations")
    
    def __repr__(self):
        return f"<VideoTranslation(id={self.id}, video_id={self.video_id}, lang={self.languages_code})>"


class SyncServiceModel(Base):
    """
    Estado persistido del sync (registro singleton por pipeline).
    failed_items / synced_items guardan ids separados por comas.
    """
    
    __tablename__ = "sync_service"
    
    id = Column(Integer, primary_key=True)
    last_sync_time = Column(DateTime(timezone=True), nullable=False)
    batch_size = Column(Integer, nullable=False, default=1000)
    failed_items = Column(Text, nullable=False, default="")
    synced_items = Column(Text, nullable=False, default="")
    
    def __repr__(self):
        return f"<SyncService(id={self.id}, last_sync_time={self.last_sync_time})>"
