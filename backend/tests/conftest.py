"""Shared fixtures for catalog tests"""
import hashlib
import io
import threading
import time
import wave
from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, init_db
from app.utils.blob_store import BlobStoreError, StoredBlob


class FakeBlobStore:
    """In-memory blob store with per-extension delays, failures and gates"""
    
    def __init__(self, delays=None, failures=(), gates=None):
        self.delays = dict(delays or {})
        self.failures = set(failures)
        self.gates = dict(gates or {})
        self.uploaded = []
        self.deleted = []
        self.completed = []
        self._lock = threading.Lock()
    
    def upload(self, path, resource_type="auto", timeout=None):
        suffix = Path(path).suffix.lstrip(".").lower()
        if suffix in self.gates:
            self.gates[suffix].wait(5)
        time.sleep(self.delays.get(suffix, 0))
        if suffix in self.failures:
            raise BlobStoreError(f"rejected .{suffix}")
        
        digest = hashlib.sha1(Path(path).read_bytes()).hexdigest()[:12]
        kind = "image" if suffix in ("png", "jpg", "jpeg", "gif") else "video"
        blob = StoredBlob(
            url=f"https://res.example.com/{kind}/upload/{digest}.{suffix}",
            public_id=f"catalog/{digest}",
            resource_type=kind,
        )
        with self._lock:
            self.uploaded.append(blob)
            self.completed.append(suffix)
        return blob
    
    def delete(self, blob, timeout=None):
        with self._lock:
            self.deleted.append(blob)


def make_wav_bytes(seconds: int = 2, framerate: int = 8000) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(framerate)
        wav.writeframes(b"\x00\x00" * framerate * seconds)
    return buffer.getvalue()


def make_png_bytes(color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def wav_file(tmp_path):
    path = tmp_path / "track.wav"
    path.write_bytes(make_wav_bytes())
    return path


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "cover.png"
    path.write_bytes(make_png_bytes())
    return path


@pytest.fixture
def make_blob_store():
    return FakeBlobStore


@pytest.fixture
def wav_bytes():
    return make_wav_bytes()


@pytest.fixture
def png_bytes():
    return make_png_bytes()
