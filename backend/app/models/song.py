"""Song model"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base


class Song(Base):
    """Song model representing a single audio track"""
    
    __tablename__ = "songs"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    artist = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=False)
    audio_url = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # Duration in seconds
    # Soft reference: no foreign key, the album may not exist
    album_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())
    
    def __repr__(self):
        return f"<Song(id={self.id}, artist='{self.artist}', title='{self.title}', album_id={self.album_id})>"
