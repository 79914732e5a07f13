"""User model"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from datetime import datetime
import uuid

from app.database import Base


class User(Base):
    """User known to the identity provider (read-only for the catalog)"""
    
    __tablename__ = "users"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    clerk_id = Column(String, nullable=False, unique=True, index=True)
    full_name = Column(String(100), nullable=False)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, server_default=func.now())
    
    def __repr__(self):
        return f"<User(id={self.id}, clerk_id='{self.clerk_id}', full_name='{self.full_name}')>"
