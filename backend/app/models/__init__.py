"""Database models"""
from app.models.album import Album
from app.models.song import Song
from app.models.user import User

__all__ = [
    "Album",
    "Song",
    "User",
]
