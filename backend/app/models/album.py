"""Album model"""
from sqlalchemy import Column, String, Integer, JSON, DateTime
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base


class Album(Base):
    """Album model representing a music album and its ordered song ids"""
    
    __tablename__ = "albums"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    artist = Column(String(100), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    release_year = Column(Integer, nullable=False)
    songs = Column(JSON, nullable=False, default=list)  # Ordered, duplicate-free Song ids
    version = Column(Integer, nullable=False)  # Bumped on every update; stale writers are rejected
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())
    
    __mapper_args__ = {"version_id_col": version}
    
    def __repr__(self):
        return f"<Album(id={self.id}, artist='{self.artist}', title='{self.title}')>"
