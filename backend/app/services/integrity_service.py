"""Album <-> song relationship bookkeeping"""
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.exceptions import NotFound, RequestTimedOut
from app.models.album import Album
from app.models.song import Song
from app.services.catalog_service import CatalogKind, CatalogService
from app.utils.deadline import Deadline

logger = logging.getLogger(__name__)


class IntegrityService:
    """
    Keeps ``Album.songs`` and ``Song.album_id`` consistent across creation,
    deletion and explicit relationship edits.
    
    Link writes happen after the record they reference exists; cascade
    writes happen before the record they depend on is removed.
    """
    
    def __init__(self, db: Session, deadline: Optional[Deadline] = None, catalog: Optional[CatalogService] = None):
        """
        Initialize integrity service
        
        Args:
            db: Database session
            deadline: Request deadline
            catalog: Catalog store to operate through (built from ``db`` if omitted)
        """
        self.db = db
        self.catalog = catalog or CatalogService(db, deadline=deadline)
    
    def link_new_song(self, song: Song) -> Optional[Album]:
        """
        Append a freshly created song to its parent album
        
        The parent reference is accepted even when the album does not
        exist; the song then stays unlisted.
        
        Returns:
            The parent Album, or None if there is none
        """
        if not song.album_id:
            return None
        
        album = self.catalog.push_song_id(song.album_id, song.id)
        if album is None:
            logger.warning(f"Song {song.id} references missing album {song.album_id}; left unlisted")
        return album
    
    def delete_song(self, song_id: str) -> None:
        """
        Delete a song, detaching it from its parent album first
        
        Raises:
            NotFound: If the song does not exist
        """
        song = self.catalog.get_by_id(CatalogKind.SONG, song_id)
        album_id = song.album_id
        
        if album_id:
            try:
                self.catalog.pull_song_id(album_id, song_id)
            except RequestTimedOut:
                raise
            except Exception as e:
                # Removing the requested song matters more than the parent's list
                self.db.rollback()
                logger.error(f"delete_song: could not detach song {song_id} from album {album_id}: {e}")
        
        self.catalog.delete_by_id(CatalogKind.SONG, song_id)
    
    def delete_album(self, album_id: str) -> int:
        """
        Delete an album and every song whose parent reference is the album
        
        Raises:
            NotFound: If the album does not exist
            
        Returns:
            Number of songs removed by the cascade
        """
        self.catalog.get_by_id(CatalogKind.ALBUM, album_id)
        
        removed = self.cascade_delete_songs(album_id)
        self.catalog.delete_by_id(CatalogKind.ALBUM, album_id)
        logger.info(f"Deleted album {album_id} and {removed} song(s)")
        return removed
    
    def cascade_delete_songs(self, album_id: str) -> int:
        """Bulk delete the songs parented to ``album_id``"""
        return self.catalog.delete_songs_by_album(album_id)
    
    def add_song_to_album(self, album_id: str, song_id: str) -> Album:
        """
        Add a song to an album's list (no-op if already listed) and point the
        song at the album
        
        Raises:
            NotFound: If the album or the song does not exist
        """
        song = self.catalog.get_by_id(CatalogKind.SONG, song_id)
        album = self.catalog.push_song_id(album_id, song_id)
        if album is None:
            raise NotFound(CatalogKind.ALBUM.value, album_id)
        
        previous = song.album_id
        if previous != album_id:
            if previous:
                self.catalog.pull_song_id(previous, song_id)
            self.catalog.set_song_album(song, album_id)
        return album
    
    def remove_song_from_album(self, album_id: str, song_id: str) -> Album:
        """
        Remove a song from an album's list (no-op if not listed) and clear
        the song's parent reference when it pointed at this album
        
        Raises:
            NotFound: If the album does not exist
        """
        album = self.catalog.pull_song_id(album_id, song_id)
        if album is None:
            raise NotFound(CatalogKind.ALBUM.value, album_id)
        
        song = self.catalog.find_by_id(CatalogKind.SONG, song_id)
        if song is not None and song.album_id == album_id:
            self.catalog.set_song_album(song, None)
        return album
