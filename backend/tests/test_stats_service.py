"""Tests for catalog statistics"""
import threading
from unittest.mock import patch

import pytest

from app.exceptions import RequestTimedOut, StatsUnavailable
from app.models.user import User
from app.services.catalog_service import CatalogService
from app.services.stats_service import StatsService
from app.utils.deadline import Deadline


ALBUM = {"title": "blue", "artist": "X", "image_url": "https://cdn.example.com/b.png", "release_year": 2020}


def song(artist, album_id=None):
    return {
        "title": "track",
        "artist": artist,
        "image_url": "https://cdn.example.com/t.png",
        "audio_url": "https://cdn.example.com/t.flac",
        "duration": 60,
        "album_id": album_id,
    }


class TestStatsService:
    """Test get_stats"""
    
    def test_empty_store(self, session_factory):
        assert StatsService(session_factory).get_stats() == {
            "total_songs": 0,
            "total_users": 0,
            "total_albums": 0,
            "unique_artists": 0,
        }
    
    def test_counts_and_distinct_artists(self, db, session_factory):
        catalog = CatalogService(db)
        catalog.create_album(ALBUM)
        catalog.create_album(dict(ALBUM, artist="Only Album"))
        catalog.create_song(song("X"))
        catalog.create_song(song("X"))
        catalog.create_song(song("Only Songs"))
        db.add(User(clerk_id="user_1", full_name="Ada"))
        db.commit()
        
        stats = StatsService(session_factory).get_stats()
        
        assert stats == {
            "total_songs": 3,
            "total_users": 1,
            "total_albums": 2,
            "unique_artists": 3,
        }
    
    def test_sub_queries_run_concurrently(self, session_factory):
        # All four counts must be in flight together to pass the barrier
        barrier = threading.Barrier(4, timeout=2)
        original = CatalogService.count
        
        def waiting_count(self, kind):
            barrier.wait()
            return original(self, kind)
        
        def waiting_distinct(self):
            barrier.wait()
            return 0
        
        with patch.object(CatalogService, "count", waiting_count), \
                patch.object(CatalogService, "count_distinct_artists", waiting_distinct):
            stats = StatsService(session_factory).get_stats()
        
        assert stats["unique_artists"] == 0
    
    def test_any_failure_fails_whole_call(self, session_factory):
        with patch.object(CatalogService, "count_distinct_artists", side_effect=RuntimeError("aggregation failed")):
            with pytest.raises(StatsUnavailable):
                StatsService(session_factory).get_stats()
    
    def test_expired_deadline(self, session_factory):
        with pytest.raises(RequestTimedOut):
            StatsService(session_factory, deadline=Deadline(0)).get_stats()
