"""
Write-side schemas for catalog entities

Each model holds the field rules a record must satisfy before the catalog
store accepts it. Titles are trimmed and title-cased during validation so the
normalized value is what gets persisted.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

IMAGE_URL_PATTERN = r"^https?://.+\.(jpg|jpeg|png|gif)$"
AUDIO_URL_PATTERN = r"^https?://.+\.(mp3|wav|flac)$"

MIN_RELEASE_YEAR = 1900


def title_case(value: str) -> str:
    """
    Normalize a title: split on whitespace, capitalize each word, rejoin
    with single spaces.

    >>> title_case("THE BIG ONE")
    'The Big One'
    """
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split())


def _stripped(value):
    return value.strip() if isinstance(value, str) else value


def _title_cased(value):
    return title_case(value) if isinstance(value, str) else value


TrimmedStr = Annotated[str, BeforeValidator(_stripped)]
# Normalized before length checks, so collapsed whitespace does not count
TitleStr = Annotated[str, BeforeValidator(_title_cased)]


class AlbumFields(BaseModel):
    """Album fields supplied by the caller (everything but the media URL)"""

    title: TitleStr = Field(..., min_length=1, max_length=200, description="Album title")
    artist: TrimmedStr = Field(..., min_length=1, max_length=100, description="Album artist")
    release_year: int = Field(..., ge=MIN_RELEASE_YEAR, description="Release year")

    @field_validator("release_year")
    @classmethod
    def _not_in_future(cls, value: int) -> int:
        current_year = datetime.now().year
        if value > current_year:
            raise ValueError(f"Release year cannot be later than {current_year}")
        return value


class AlbumCreate(AlbumFields):
    """Album fields accepted on create"""

    image_url: TrimmedStr = Field(..., pattern=IMAGE_URL_PATTERN, description="Cover art URL")


class SongFields(BaseModel):
    """Song fields supplied by the caller (everything but the media URLs)"""

    title: TitleStr = Field(..., min_length=1, description="Song title")
    artist: TrimmedStr = Field(..., min_length=1, description="Song artist")
    duration: int = Field(..., ge=1, description="Duration in seconds")
    album_id: Optional[str] = Field(None, description="Parent album id")

    @field_validator("album_id", mode="before")
    @classmethod
    def _blank_album_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SongCreate(SongFields):
    """Song fields accepted on create"""

    image_url: TrimmedStr = Field(..., pattern=IMAGE_URL_PATTERN, description="Cover art URL")
    audio_url: TrimmedStr = Field(..., pattern=AUDIO_URL_PATTERN, description="Audio file URL")


class UserCreate(BaseModel):
    """User fields accepted from the identity provider callback"""

    clerk_id: TrimmedStr = Field(..., min_length=1)
    full_name: TitleStr = Field(..., min_length=2, max_length=100)
    image_url: Optional[str] = None
