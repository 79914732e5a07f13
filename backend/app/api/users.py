"""Users API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.auth import get_current_user_id
from app.database import get_db
from app.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
    
    id: str
    clerk_id: str
    full_name: str
    image_url: str | None
    created_at: datetime | None


@router.get("", response_model=List[UserResponse])
def list_users(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """List every user except the caller"""
    return UserService(db).get_users_except(user_id)
