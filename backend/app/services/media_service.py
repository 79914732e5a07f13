"""Media upload orchestration for catalog ingestion"""
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Iterable, Optional
import logging

from app.exceptions import MediaUploadFailed, MissingMedia, RequestTimedOut, ValidationFailed
from app.utils.blob_store import StoredBlob
from app.utils.deadline import Deadline
from app.utils.media_probe import MediaProbeError, probe_audio_duration, verify_image

logger = logging.getLogger(__name__)


@dataclass
class MediaPayload:
    """Binary data waiting in a temporary file"""
    
    path: str
    filename: Optional[str] = None
    content_type: Optional[str] = None


class MediaUploadService:
    """
    Uploads the media an entity needs before its record is written
    
    Payloads required together are uploaded concurrently; either all of
    them succeed or the call fails and every sibling that did make it to
    the blob store is destroyed again.
    """
    
    def __init__(self, blob_store, max_workers: int = 4):
        """
        Args:
            blob_store: Object with ``upload(path, resource_type, timeout)`` and
                ``delete(blob, timeout)``
            max_workers: Upper bound on concurrent uploads per call
        """
        self.blob_store = blob_store
        self.max_workers = max(1, max_workers)
    
    @staticmethod
    def require(payloads: Dict[str, Optional[MediaPayload]], required: Iterable[str]) -> Dict[str, MediaPayload]:
        """Reject the request before any network call if a required payload is missing"""
        missing = [name for name in required if payloads.get(name) is None]
        if missing:
            raise MissingMedia(missing)
        return {name: payloads[name] for name in required}
    
    @staticmethod
    def inspect_audio(name: str, payload: MediaPayload) -> int:
        """Validate an audio payload locally and return its duration in seconds"""
        try:
            return probe_audio_duration(payload.path)
        except MediaProbeError as e:
            raise ValidationFailed({name: str(e)})
    
    @staticmethod
    def inspect_image(name: str, payload: MediaPayload) -> None:
        try:
            verify_image(payload.path)
        except MediaProbeError as e:
            raise ValidationFailed({name: str(e)})
    
    def upload(self, payload: MediaPayload, deadline: Optional[Deadline] = None) -> str:
        """Upload one payload and return its public URL"""
        return self.upload_all({"file": payload}, ["file"], deadline)["file"].url
    
    def upload_all(
        self,
        payloads: Dict[str, Optional[MediaPayload]],
        required: Iterable[str],
        deadline: Optional[Deadline] = None,
    ) -> Dict[str, StoredBlob]:
        """
        Upload every required payload
        
        Args:
            payloads: Logical name -> payload (None when not attached)
            required: Names that must all be present and uploaded
            deadline: Request deadline
            
        Returns:
            Logical name -> StoredBlob, independent of completion order
        """
        deadline = deadline or Deadline.unbounded()
        wanted = self.require(payloads, list(required))
        deadline.check("media upload")
        
        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(wanted)))
        try:
            futures = {
                executor.submit(self._upload_one, name, payload, deadline): name
                for name, payload in wanted.items()
            }
            done, pending = wait(futures, timeout=deadline.remaining())
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        
        uploaded: Dict[str, StoredBlob] = {}
        failures: Dict[str, BaseException] = {}
        for future in done:
            name = futures[future]
            error = future.exception()
            if error is None:
                uploaded[name] = future.result()
            else:
                failures[name] = error
        
        if pending:
            # Uploads still in flight are cleaned up once they land
            for future in pending:
                future.add_done_callback(self._discard_late)
            self.discard(uploaded.values(), deadline=None)
            names = ", ".join(sorted(futures[f] for f in pending))
            logger.error(f"Media upload timed out waiting for: {names}")
            raise RequestTimedOut(detail=f"upload of {names} did not finish in time")
        
        if failures:
            self.discard(uploaded.values(), deadline=None)
            detail = "; ".join(f"{name}: {error}" for name, error in sorted(failures.items()))
            logger.error(f"Media upload failed ({detail})")
            raise MediaUploadFailed(detail=detail)
        
        return {name: uploaded[name] for name in wanted}
    
    def _upload_one(self, name: str, payload: MediaPayload, deadline: Deadline) -> StoredBlob:
        blob = self.blob_store.upload(payload.path, resource_type="auto", timeout=deadline.remaining())
        logger.info(f"Uploaded {name} ({payload.filename or payload.path}) -> {blob.url}")
        return blob
    
    def _discard_late(self, future) -> None:
        if not future.cancelled() and future.exception() is None:
            self.discard([future.result()])
    
    def discard(self, blobs: Iterable[StoredBlob], deadline: Optional[Deadline] = None) -> None:
        """Best-effort removal of blobs no record will reference"""
        timeout = deadline.remaining() if deadline else None
        for blob in blobs:
            try:
                self.blob_store.delete(blob, timeout=timeout)
                logger.info(f"Discarded orphaned blob {blob.public_id}")
            except Exception as e:
                logger.warning(f"Could not discard blob {blob.public_id}: {e}")
