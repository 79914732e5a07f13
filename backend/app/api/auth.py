"""Identity provider callback endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.database import get_db
from app.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


class AuthCallbackRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    id: str = Field(..., min_length=1)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None


@router.post("/callback")
def auth_callback(body: AuthCallbackRequest, db: Session = Depends(get_db)):
    """Record the signed-in user if not known yet"""
    UserService(db).ensure_user(body.id, body.first_name, body.last_name, body.image_url)
    return {"success": True}
