"""Catalog store: validated persistence and queries for albums and songs"""
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence
import logging
import random

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select, union
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.exceptions import NotFound, UpdateConflict, ValidationFailed
from app.models.album import Album
from app.models.song import Song
from app.models.user import User
from app.schemas import AlbumCreate, AlbumFields, SongCreate, SongFields
from app.utils.deadline import Deadline

logger = logging.getLogger(__name__)


class CatalogKind(str, Enum):
    """Entity kinds held by the catalog"""
    
    ALBUM = "album"
    SONG = "song"
    USER = "user"
    
    @property
    def model(self):
        return {
            CatalogKind.ALBUM: Album,
            CatalogKind.SONG: Song,
            CatalogKind.USER: User,
        }[self]


SONG_SAMPLE_PROJECTION = ("id", "title", "artist", "image_url", "audio_url")

# Retries of an album song list update that lost a race with another writer
ALBUM_UPDATE_ATTEMPTS = 20


def _validation_errors(error: ValidationError) -> Dict[str, str]:
    errors = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "__root__"
        errors.setdefault(field, item.get("msg", "invalid value"))
    return errors


class CatalogService:
    """Service for album and song records"""
    
    def __init__(self, db: Session, deadline: Optional[Deadline] = None, rng: Optional[random.Random] = None):
        """
        Initialize catalog service
        
        Args:
            db: Database session
            deadline: Request deadline checked before every database call
            rng: Random source for sampling
        """
        self.db = db
        self.deadline = deadline or Deadline.unbounded()
        self.rng = rng or random.SystemRandom()
    
    # -- creation --------------------------------------------------------
    
    @staticmethod
    def _validate(schema, fields: dict) -> BaseModel:
        try:
            return schema(**fields)
        except ValidationError as e:
            raise ValidationFailed(_validation_errors(e)) from e
    
    def check_album_fields(self, fields: dict) -> None:
        """Validate the caller-supplied album fields ahead of media upload"""
        self._validate(AlbumFields, fields)
    
    def check_song_fields(self, fields: dict) -> None:
        """Validate the caller-supplied song fields ahead of media upload"""
        self._validate(SongFields, fields)
    
    def create_album(self, fields: dict) -> Album:
        """
        Validate and persist a new album
        
        Args:
            fields: title, artist, image_url, release_year
            
        Returns:
            Created Album instance with an empty song list
        """
        data = self._validate(AlbumCreate, fields)
        self.deadline.check("create album")
        
        album = Album(
            title=data.title,
            artist=data.artist,
            image_url=data.image_url,
            release_year=data.release_year,
            songs=[],
        )
        self._commit_new(album)
        logger.info(f"Created album {album.id}: {album.artist} - {album.title}")
        return album
    
    def create_song(self, fields: dict) -> Song:
        """
        Validate and persist a new song (does not touch the parent album)
        
        Args:
            fields: title, artist, image_url, audio_url, duration, album_id
            
        Returns:
            Created Song instance
        """
        data = self._validate(SongCreate, fields)
        self.deadline.check("create song")
        
        song = Song(
            title=data.title,
            artist=data.artist,
            image_url=data.image_url,
            audio_url=data.audio_url,
            duration=data.duration,
            album_id=data.album_id,
        )
        self._commit_new(song)
        logger.info(f"Created song {song.id}: {song.artist} - {song.title}")
        return song
    
    def _commit_new(self, record) -> None:
        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
    
    # -- reads -----------------------------------------------------------
    
    def find_by_id(self, kind: CatalogKind, entity_id: str):
        """Return the record or None"""
        self.deadline.check(f"get {kind.value}")
        model = kind.model
        return self.db.query(model).filter(model.id == entity_id).first()
    
    def get_by_id(self, kind: CatalogKind, entity_id: str):
        """Return the record or raise NotFound"""
        record = self.find_by_id(kind, entity_id)
        if record is None:
            raise NotFound(kind.value, entity_id)
        return record
    
    def populate_songs(self, album: Album) -> List[Song]:
        """Resolve an album's song ids to records, keeping list order"""
        song_ids = list(album.songs or [])
        if not song_ids:
            return []
        self.deadline.check("populate album songs")
        songs = self.db.query(Song).filter(Song.id.in_(song_ids)).all()
        by_id = {song.id: song for song in songs}
        return [by_id[song_id] for song_id in song_ids if song_id in by_id]
    
    def list_all(self, kind: CatalogKind, newest_first: bool = False) -> list:
        """Return every record of a kind, optionally newest first"""
        self.deadline.check(f"list {kind.value}s")
        model = kind.model
        query = self.db.query(model)
        if newest_first:
            query = query.order_by(model.created_at.desc(), model.id.desc())
        return query.all()
    
    def sample_random(
        self,
        kind: CatalogKind,
        size: int,
        projection: Sequence[str] = SONG_SAMPLE_PROJECTION,
    ) -> List[dict]:
        """
        Pick ``size`` records uniformly at random, without replacement
        
        Args:
            kind: Entity kind to sample
            size: Number of records wanted; all records are returned when
                the collection is smaller
            projection: Attribute names kept in each result
            
        Returns:
            List of dictionaries restricted to ``projection``
        """
        self.deadline.check(f"sample {kind.value}s")
        model = kind.model
        ids = [row[0] for row in self.db.query(model.id).order_by(model.created_at, model.id).all()]
        chosen = self.rng.sample(ids, min(max(size, 0), len(ids)))
        if not chosen:
            return []
        
        self.deadline.check(f"fetch sampled {kind.value}s")
        records = {record.id: record for record in self.db.query(model).filter(model.id.in_(chosen)).all()}
        return [
            {field: getattr(records[record_id], field) for field in projection}
            for record_id in chosen
            if record_id in records
        ]
    
    # -- counts ----------------------------------------------------------
    
    def count(self, kind: CatalogKind) -> int:
        self.deadline.check(f"count {kind.value}s")
        return self.db.query(func.count(kind.model.id)).scalar() or 0
    
    def count_distinct_artists(self) -> int:
        """Number of distinct artist strings across songs and albums"""
        self.deadline.check("count distinct artists")
        artists = union(select(Song.artist), select(Album.artist)).subquery()
        return self.db.execute(select(func.count()).select_from(artists)).scalar() or 0
    
    # -- relationship list primitives -----------------------------------
    
    def push_song_id(self, album_id: str, song_id: str) -> Optional[Album]:
        """
        Append a song id to an album's list unless already present
        
        Returns:
            Updated Album, or None when the album does not exist
        """
        return self._update_song_ids(
            album_id,
            lambda current: current if song_id in current else current + [song_id],
        )
    
    def pull_song_id(self, album_id: str, song_id: str) -> Optional[Album]:
        """
        Remove a song id from an album's list if present
        
        Returns:
            Updated Album, or None when the album does not exist
        """
        return self._update_song_ids(
            album_id,
            lambda current: [existing for existing in current if existing != song_id],
        )
    
    def _update_song_ids(self, album_id: str, change: Callable[[List[str]], List[str]]) -> Optional[Album]:
        """
        Read-modify-write of ``Album.songs`` guarded by the album version
        
        The row is locked where the database supports ``FOR UPDATE``; on top
        of that the versioned UPDATE only matches the row that was read, so a
        concurrent writer makes the flush fail with StaleDataError and the
        change is re-applied to the fresh list.
        """
        for attempt in range(1, ALBUM_UPDATE_ATTEMPTS + 1):
            self.deadline.check("update album songs")
            album = (
                self.db.query(Album)
                .filter(Album.id == album_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if album is None:
                return None
            
            current = list(album.songs or [])
            updated = change(current)
            if updated == current:
                self.db.commit()
                return album
            
            album.songs = updated
            try:
                self.db.commit()
                return album
            except StaleDataError:
                self.db.rollback()
                logger.info(f"Album {album_id} changed concurrently, retrying song list update ({attempt})")
        
        logger.error(f"Giving up on album {album_id} song list after {ALBUM_UPDATE_ATTEMPTS} attempts")
        raise UpdateConflict(detail=f"album {album_id} kept changing")
    
    def set_song_album(self, song: Song, album_id: Optional[str]) -> Song:
        self.deadline.check("update song album")
        song.album_id = album_id
        self.db.commit()
        return song
    
    # -- deletion --------------------------------------------------------
    
    def delete_by_id(self, kind: CatalogKind, entity_id: str) -> None:
        """Delete one record, raising NotFound when absent"""
        self.deadline.check(f"delete {kind.value}")
        model = kind.model
        deleted = self.db.query(model).filter(model.id == entity_id).delete(synchronize_session=False)
        self.db.commit()
        if not deleted:
            raise NotFound(kind.value, entity_id)
        logger.info(f"Deleted {kind.value} {entity_id}")
    
    def delete_songs_by_album(self, album_id: str) -> int:
        """Bulk delete every song whose parent reference is ``album_id``"""
        self.deadline.check("delete album songs")
        deleted = self.db.query(Song).filter(Song.album_id == album_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted
    
