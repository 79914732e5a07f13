"""Songs API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.auth import require_admin
from app.database import get_db
from app.services.catalog_service import CatalogKind, CatalogService
from app.utils.deadline import Deadline
from app.api.deps import get_deadline

router = APIRouter(prefix="/api/songs", tags=["songs"])

FEATURED_SIZE = 6
MADE_FOR_YOU_SIZE = 4
TRENDING_SIZE = 4


class SongResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
    
    id: str
    title: str
    artist: str
    image_url: str
    audio_url: str
    duration: int
    album_id: str | None
    created_at: datetime | None
    updated_at: datetime | None


class SongSampleResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    id: str
    title: str
    artist: str
    image_url: str
    audio_url: str


@router.get("", response_model=List[SongResponse], dependencies=[Depends(require_admin)])
def list_songs(db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """List all songs, newest first (admin only)"""
    return CatalogService(db, deadline=deadline).list_all(CatalogKind.SONG, newest_first=True)


def _sample(db: Session, deadline: Deadline, size: int):
    return CatalogService(db, deadline=deadline).sample_random(CatalogKind.SONG, size)


@router.get("/featured", response_model=List[SongSampleResponse])
def featured_songs(db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Random selection for the "Featured" section"""
    return _sample(db, deadline, FEATURED_SIZE)


@router.get("/made-for-you", response_model=List[SongSampleResponse])
def made_for_you_songs(db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Random selection for the "Made for You" section"""
    return _sample(db, deadline, MADE_FOR_YOU_SIZE)


@router.get("/trending", response_model=List[SongSampleResponse])
def trending_songs(db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Random selection for the "Trending" section"""
    return _sample(db, deadline, TRENDING_SIZE)


@router.get("/{song_id}", response_model=SongResponse)
def get_song(song_id: str, db: Session = Depends(get_db), deadline: Deadline = Depends(get_deadline)):
    """Get a single song"""
    return CatalogService(db, deadline=deadline).get_by_id(CatalogKind.SONG, song_id)
