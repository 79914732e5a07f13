"""Shared API dependencies and upload helpers"""
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional
import logging
import os
import shutil
import tempfile

from fastapi import Depends, UploadFile

from app.config import settings
from app.services.media_service import MediaPayload, MediaUploadService
from app.utils.blob_store import get_blob_store
from app.utils.deadline import Deadline

logger = logging.getLogger(__name__)


def get_deadline() -> Deadline:
    """Dependency creating the deadline for the current request"""
    return Deadline(settings.request_timeout_seconds)


def get_media_service(blob_store=Depends(get_blob_store)) -> MediaUploadService:
    return MediaUploadService(blob_store, max_workers=settings.upload_workers)


def _spool(upload: UploadFile) -> MediaPayload:
    suffix = Path(upload.filename or "").suffix
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=settings.temp_upload_dir) as tmp:
        upload.file.seek(0)
        shutil.copyfileobj(upload.file, tmp)
    return MediaPayload(path=tmp.name, filename=upload.filename, content_type=upload.content_type)


@contextmanager
def spooled_uploads(**uploads: Optional[UploadFile]) -> Iterator[Dict[str, Optional[MediaPayload]]]:
    """
    Copy multipart uploads to temporary files for the duration of the block
    
    Missing uploads map to None so the caller can reject them before any
    upload is attempted.
    """
    payloads: Dict[str, Optional[MediaPayload]] = {}
    try:
        for name, upload in uploads.items():
            payloads[name] = _spool(upload) if upload is not None and upload.filename else None
        yield payloads
    finally:
        for payload in payloads.values():
            if payload is None:
                continue
            try:
                os.unlink(payload.path)
            except OSError as e:
                logger.warning(f"Could not remove temporary upload {payload.path}: {e}")
