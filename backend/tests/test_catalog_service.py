"""Tests for the catalog store"""
import random
from datetime import datetime
from unittest.mock import patch

import pytest

from app.exceptions import NotFound, RequestTimedOut, UpdateConflict, ValidationFailed
from app.models.user import User
from app.services import catalog_service
from app.services.catalog_service import CatalogKind, CatalogService
from app.utils.deadline import Deadline


def album_fields(**overrides):
    fields = {
        "title": "blue",
        "artist": "X",
        "image_url": "https://cdn.example.com/blue.png",
        "release_year": 2020,
    }
    fields.update(overrides)
    return fields


def song_fields(**overrides):
    fields = {
        "title": "hello world",
        "artist": "X",
        "image_url": "https://cdn.example.com/hello.jpg",
        "audio_url": "https://cdn.example.com/hello.mp3",
        "duration": 200,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def catalog(db):
    return CatalogService(db, rng=random.Random(42))


class TestCreate:
    """Test validated creation"""
    
    def test_create_album(self, catalog):
        album = catalog.create_album(album_fields())
        
        assert album.id
        assert album.title == "Blue"
        assert album.songs == []
        assert album.created_at is not None
        assert album.updated_at is not None
    
    def test_create_song_title_cased(self, catalog):
        assert catalog.create_song(song_fields(title="hello world")).title == "Hello World"
        assert catalog.create_song(song_fields(title="THE BIG ONE")).title == "The Big One"
    
    def test_validation_failure_lists_fields_and_writes_nothing(self, catalog):
        with pytest.raises(ValidationFailed) as exc_info:
            catalog.create_song(song_fields(duration=0, audio_url="https://cdn.example.com/a.ogg"))
        
        assert set(exc_info.value.errors) == {"duration", "audio_url"}
        assert catalog.count(CatalogKind.SONG) == 0
    
    def test_expired_deadline_blocks_write(self, db):
        catalog = CatalogService(db, deadline=Deadline(0))
        
        with pytest.raises(RequestTimedOut):
            catalog.create_album(album_fields())


class TestReads:
    """Test lookups and listings"""
    
    def test_get_by_id_missing(self, catalog):
        with pytest.raises(NotFound):
            catalog.get_by_id(CatalogKind.ALBUM, "missing")
    
    def test_populate_keeps_list_order_and_skips_dangling(self, catalog):
        album = catalog.create_album(album_fields())
        first = catalog.create_song(song_fields(title="one", album_id=album.id))
        second = catalog.create_song(song_fields(title="two", album_id=album.id))
        catalog.push_song_id(album.id, second.id)
        catalog.push_song_id(album.id, "ghost")
        catalog.push_song_id(album.id, first.id)
        
        songs = catalog.populate_songs(catalog.get_by_id(CatalogKind.ALBUM, album.id))
        
        assert [song.id for song in songs] == [second.id, first.id]
    
    def test_list_all_newest_first(self, catalog, db):
        songs = [catalog.create_song(song_fields(title=f"song {n}")) for n in range(3)]
        for day, song in enumerate(songs, start=1):
            song.created_at = datetime(2024, 1, day)
        db.commit()

        listed = [song.id for song in catalog.list_all(CatalogKind.SONG, newest_first=True)]

        assert listed == [song.id for song in reversed(songs)]


class TestSampleRandom:
    """Test random sampling"""
    
    def test_sample_larger_than_collection_returns_everything(self, catalog):
        ids = {catalog.create_song(song_fields(title=f"song {n}")).id for n in range(3)}
        
        sample = catalog.sample_random(CatalogKind.SONG, 10)
        
        assert len(sample) == 3
        assert {item["id"] for item in sample} == ids
    
    def test_sample_has_no_duplicates_and_is_projected(self, catalog):
        for n in range(8):
            catalog.create_song(song_fields(title=f"song {n}"))
        
        sample = catalog.sample_random(CatalogKind.SONG, 4)
        
        assert len({item["id"] for item in sample}) == 4
        assert set(sample[0]) == {"id", "title", "artist", "image_url", "audio_url"}
    
    def test_sample_empty_collection(self, catalog):
        assert catalog.sample_random(CatalogKind.SONG, 6) == []
    
    def test_sample_covers_every_record(self, db):
        catalog = CatalogService(db, rng=random.Random(7))
        ids = {catalog.create_song(song_fields(title=f"song {n}")).id for n in range(5)}
        
        seen = set()
        for _ in range(60):
            seen.update(item["id"] for item in catalog.sample_random(CatalogKind.SONG, 1))
        
        assert seen == ids


class TestRelationshipPrimitives:
    """Test push/pull on the album song list"""
    
    def test_push_is_set_like(self, catalog):
        album = catalog.create_album(album_fields())
        
        catalog.push_song_id(album.id, "s1")
        catalog.push_song_id(album.id, "s1")
        catalog.push_song_id(album.id, "s2")
        
        assert catalog.get_by_id(CatalogKind.ALBUM, album.id).songs == ["s1", "s2"]
    
    def test_pull_absent_is_noop(self, catalog):
        album = catalog.create_album(album_fields())
        catalog.push_song_id(album.id, "s1")
        
        catalog.pull_song_id(album.id, "other")
        catalog.pull_song_id(album.id, "s1")
        catalog.pull_song_id(album.id, "s1")
        
        assert catalog.get_by_id(CatalogKind.ALBUM, album.id).songs == []
    
    def test_push_to_missing_album_returns_none(self, catalog):
        assert catalog.push_song_id("missing", "s1") is None
        assert catalog.pull_song_id("missing", "s1") is None
    
    def test_lost_race_is_retried_on_fresh_list(self, catalog, db, session_factory):
        album = catalog.create_album(album_fields())
        rival = session_factory()
        real_commit = db.commit
        raced = []
        
        def commit_after_rival_write():
            if not raced:
                raced.append(True)
                CatalogService(rival).push_song_id(album.id, "rival")
            real_commit()
        
        with patch.object(db, "commit", side_effect=commit_after_rival_write):
            catalog.push_song_id(album.id, "mine")
        rival.close()
        
        assert catalog.get_by_id(CatalogKind.ALBUM, album.id).songs == ["rival", "mine"]
    
    def test_endless_races_raise_conflict(self, catalog, db, session_factory, monkeypatch):
        monkeypatch.setattr(catalog_service, "ALBUM_UPDATE_ATTEMPTS", 2)
        album = catalog.create_album(album_fields())
        rival = session_factory()
        real_commit = db.commit
        rivals = iter(range(10))
        
        def commit_after_rival_write():
            CatalogService(rival).push_song_id(album.id, f"rival-{next(rivals)}")
            real_commit()
        
        with patch.object(db, "commit", side_effect=commit_after_rival_write):
            with pytest.raises(UpdateConflict):
                catalog.push_song_id(album.id, "mine")
        rival.close()
        
        assert "mine" not in catalog.get_by_id(CatalogKind.ALBUM, album.id).songs


class TestCounts:
    """Test counts and distinct artists"""
    
    def test_distinct_artists_across_kinds(self, catalog, db):
        catalog.create_album(album_fields(artist="X"))
        catalog.create_song(song_fields(artist="X"))
        catalog.create_song(song_fields(artist="Y"))
        catalog.create_album(album_fields(artist="Z"))
        catalog.create_song(song_fields(artist="x"))
        
        assert catalog.count_distinct_artists() == 4
    
    def test_empty_counts(self, catalog):
        assert catalog.count(CatalogKind.SONG) == 0
        assert catalog.count(CatalogKind.ALBUM) == 0
        assert catalog.count(CatalogKind.USER) == 0
        assert catalog.count_distinct_artists() == 0
    
    def test_user_count(self, catalog, db):
        db.add(User(clerk_id="user_1", full_name="Ada Lovelace"))
        db.commit()
        
        assert catalog.count(CatalogKind.USER) == 1


class TestDelete:
    """Test deletion primitives"""
    
    def test_delete_missing_raises(self, catalog):
        with pytest.raises(NotFound):
            catalog.delete_by_id(CatalogKind.SONG, "missing")
    
    def test_delete_songs_by_album(self, catalog):
        album = catalog.create_album(album_fields())
        catalog.create_song(song_fields(album_id=album.id))
        catalog.create_song(song_fields(album_id=album.id))
        keep = catalog.create_song(song_fields())
        
        assert catalog.delete_songs_by_album(album.id) == 2
        assert [song.id for song in catalog.list_all(CatalogKind.SONG)] == [keep.id]

