"""Catalog-wide statistics"""
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional
import logging

from sqlalchemy.orm import sessionmaker

from app.exceptions import RequestTimedOut, StatsUnavailable
from app.services.catalog_service import CatalogKind, CatalogService
from app.utils.deadline import Deadline

logger = logging.getLogger(__name__)


class StatsService:
    """
    Computes totals and the distinct artist count
    
    The four counts run concurrently, each on its own session, and the
    result is only assembled once all of them have finished.
    """
    
    def __init__(self, session_factory: sessionmaker, deadline: Optional[Deadline] = None):
        """
        Args:
            session_factory: Factory producing one session per sub-query
            deadline: Request deadline
        """
        self.session_factory = session_factory
        self.deadline = deadline or Deadline.unbounded()
    
    def _run(self, query: Callable[[CatalogService], int]) -> int:
        db = self.session_factory()
        try:
            return query(CatalogService(db, deadline=self.deadline))
        finally:
            db.close()
    
    def get_stats(self) -> Dict[str, int]:
        """
        Returns:
            Dictionary with total_songs, total_users, total_albums and
            unique_artists
        """
        queries = {
            "total_songs": lambda catalog: catalog.count(CatalogKind.SONG),
            "total_users": lambda catalog: catalog.count(CatalogKind.USER),
            "total_albums": lambda catalog: catalog.count(CatalogKind.ALBUM),
            "unique_artists": lambda catalog: catalog.count_distinct_artists(),
        }
        
        self.deadline.check("stats")
        executor = ThreadPoolExecutor(max_workers=len(queries))
        try:
            futures = {executor.submit(self._run, query): name for name, query in queries.items()}
            done, pending = wait(futures, timeout=self.deadline.remaining())
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        
        if pending:
            names = ", ".join(sorted(futures[f] for f in pending))
            logger.error(f"get_stats: timed out waiting for {names}")
            raise RequestTimedOut(detail=f"stats sub-queries unfinished: {names}")
        
        stats = {}
        for future in done:
            name = futures[future]
            error = future.exception()
            if isinstance(error, RequestTimedOut):
                raise error
            if error is not None:
                logger.error(f"get_stats: {name} failed: {error}")
                raise StatsUnavailable(detail=f"{name}: {error}") from error
            stats[name] = future.result()
        
        return {name: stats[name] for name in queries}
