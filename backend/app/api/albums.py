"""Albums API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.database import get_db
from app.services.catalog_service import CatalogKind, CatalogService
from app.utils.deadline import Deadline
from app.api.deps import get_deadline
from app.api.songs import SongResponse

router = APIRouter(prefix="/api/albums", tags=["albums"])


class AlbumResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
    
    id: str
    title: str
    artist: str
    image_url: str
    release_year: int
    songs: List[str]
    created_at: datetime | None
    updated_at: datetime | None


class AlbumDetailResponse(AlbumResponse):
    songs: List[SongResponse]


@router.get("", response_model=List[AlbumResponse])
def list_albums(db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """List all albums"""
    return CatalogService(db, deadline=deadline).list_all(CatalogKind.ALBUM)


@router.get("/{album_id}", response_model=AlbumDetailResponse)
def get_album(album_id: str, db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Get album details with its songs expanded"""
    catalog = CatalogService(db, deadline=deadline)
    album = catalog.get_by_id(CatalogKind.ALBUM, album_id)
    
    return {
        "id": album.id,
        "title": album.title,
        "artist": album.artist,
        "image_url": album.image_url,
        "release_year": album.release_year,
        "songs": catalog.populate_songs(album),
        "created_at": album.created_at,
        "updated_at": album.updated_at,
    }
