"""Statistics API endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import sessionmaker
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.auth import require_admin
from app.database import get_session_factory
from app.services.stats_service import StatsService
from app.utils.deadline import Deadline
from app.api.deps import get_deadline

router = APIRouter(prefix="/api/stats", tags=["stats"])


class StatsResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    total_albums: int
    total_songs: int
    total_users: int
    unique_artists: int


@router.get("", response_model=StatsResponse, dependencies=[Depends(require_admin)])
def get_stats(
    session_factory: sessionmaker = Depends(get_session_factory),
    deadline: Deadline = Depends(get_deadline),
):
    """Catalog totals and distinct artist count (admin only)"""
    return StatsService(session_factory, deadline=deadline).get_stats()
