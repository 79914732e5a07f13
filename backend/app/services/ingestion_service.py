"""Ingestion path: upload media, persist the record, link it to its parent"""
from typing import Dict, Optional
import logging

from sqlalchemy.orm import Session

from app.models.album import Album
from app.models.song import Song
from app.services.catalog_service import CatalogService
from app.services.integrity_service import IntegrityService
from app.services.media_service import MediaPayload, MediaUploadService
from app.utils.deadline import Deadline

logger = logging.getLogger(__name__)

AUDIO_FIELD = "audioFile"
IMAGE_FIELD = "imageFile"
SONG_MEDIA = (AUDIO_FIELD, IMAGE_FIELD)
ALBUM_MEDIA = (IMAGE_FIELD,)


class IngestionService:
    """Creates albums and songs from uploaded media"""
    
    def __init__(self, db: Session, media: MediaUploadService, deadline: Optional[Deadline] = None):
        """
        Initialize ingestion service
        
        Args:
            db: Database session
            media: Upload orchestrator
            deadline: Request deadline
        """
        self.db = db
        self.media = media
        self.deadline = deadline or Deadline.unbounded()
        self.catalog = CatalogService(db, deadline=self.deadline)
        self.integrity = IntegrityService(db, catalog=self.catalog)
    
    def create_song(self, fields: dict, payloads: Dict[str, Optional[MediaPayload]]) -> Song:
        """
        Create a song from its audio and cover image
        
        Everything that can be checked locally (attached files, media
        contents, caller fields) is checked before anything is uploaded.
        
        Args:
            fields: title, artist, duration (optional, read from the audio when
                missing), album_id (optional)
            payloads: "audioFile" and "imageFile" payloads
            
        Returns:
            Created Song instance
        """
        wanted = self.media.require(payloads, SONG_MEDIA)
        self.media.inspect_image(IMAGE_FIELD, wanted[IMAGE_FIELD])
        probed_duration = self.media.inspect_audio(AUDIO_FIELD, wanted[AUDIO_FIELD])
        
        fields = dict(fields)
        if fields.get("duration") in (None, ""):
            fields["duration"] = probed_duration
        self.catalog.check_song_fields(fields)
        
        blobs = self.media.upload_all(wanted, SONG_MEDIA, self.deadline)
        fields["audio_url"] = blobs[AUDIO_FIELD].url
        fields["image_url"] = blobs[IMAGE_FIELD].url
        
        try:
            song = self.catalog.create_song(fields)
        except Exception:
            logger.error("create_song: record write failed, discarding uploaded media")
            self.media.discard(blobs.values())
            raise
        
        self.integrity.link_new_song(song)
        return song
    
    def create_album(self, fields: dict, payloads: Dict[str, Optional[MediaPayload]]) -> Album:
        """
        Create an album from its cover image
        
        Args:
            fields: title, artist, release_year
            payloads: "imageFile" payload
            
        Returns:
            Created Album instance
        """
        wanted = self.media.require(payloads, ALBUM_MEDIA)
        self.media.inspect_image(IMAGE_FIELD, wanted[IMAGE_FIELD])
        self.catalog.check_album_fields(fields)
        
        blobs = self.media.upload_all(wanted, ALBUM_MEDIA, self.deadline)
        fields = dict(fields, image_url=blobs[IMAGE_FIELD].url)
        
        try:
            return self.catalog.create_album(fields)
        except Exception:
            logger.error("create_album: record write failed, discarding uploaded media")
            self.media.discard(blobs.values())
            raise
