"""Admin API endpoints: ingestion, deletion and album membership edits"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.auth import require_admin
from app.database import get_db
from app.services.ingestion_service import IngestionService
from app.services.integrity_service import IntegrityService
from app.services.media_service import MediaUploadService
from app.utils.deadline import Deadline
from app.api.albums import AlbumResponse
from app.api.deps import get_deadline, get_media_service, spooled_uploads
from app.api.songs import SongResponse

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


@router.get("/check")
def check_admin():
    """Confirm the caller is an administrator"""
    return {"isAdmin": True}


@router.post("/songs", response_model=SongResponse, status_code=status.HTTP_201_CREATED)
def create_song(
    title: str = Form(...),
    artist: str = Form(...),
    duration: Optional[int] = Form(None),
    albumId: Optional[str] = Form(None),
    audioFile: Optional[UploadFile] = File(None),
    imageFile: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    media: MediaUploadService = Depends(get_media_service),
    deadline: Deadline = Depends(get_deadline),
):
    """Upload a song's audio and cover image, then create the song"""
    fields = {"title": title, "artist": artist, "duration": duration, "album_id": albumId}
    
    with spooled_uploads(audioFile=audioFile, imageFile=imageFile) as payloads:
        return IngestionService(db, media, deadline=deadline).create_song(fields, payloads)


@router.delete("/songs/{song_id}")
def delete_song(song_id: str, db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Delete a song and detach it from its album"""
    IntegrityService(db, deadline=deadline).delete_song(song_id)
    return {"message": "Song deleted successfully"}


@router.post("/albums", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
def create_album(
    title: str = Form(...),
    artist: str = Form(...),
    releaseYear: int = Form(...),
    imageFile: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    media: MediaUploadService = Depends(get_media_service),
    deadline: Deadline = Depends(get_deadline),
):
    """Upload an album's cover image, then create the album"""
    fields = {"title": title, "artist": artist, "release_year": releaseYear}
    
    with spooled_uploads(imageFile=imageFile) as payloads:
        return IngestionService(db, media, deadline=deadline).create_album(fields, payloads)


@router.delete("/albums/{album_id}")
def delete_album(album_id: str, db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Delete an album and every song that belongs to it"""
    removed = IntegrityService(db, deadline=deadline).delete_album(album_id)
    return {"message": "Album deleted successfully", "songsDeleted": removed}


@router.post("/albums/{album_id}/songs/{song_id}", response_model=AlbumResponse)
def add_song_to_album(
    album_id: str,
    song_id: str,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(get_deadline),
):
    """Add a song to an album (no-op if already listed)"""
    return IntegrityService(db, deadline=deadline).add_song_to_album(album_id, song_id)


@router.delete("/albums/{album_id}/songs/{song_id}", response_model=AlbumResponse)
def remove_song_from_album(
    album_id: str,
    song_id: str,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(get_deadline),
):
    """Remove a song from an album (no-op if not listed)"""
    return IntegrityService(db, deadline=deadline).remove_song_from_album(album_id, song_id)
