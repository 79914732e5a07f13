"""User service for identity-provider backed users"""
from typing import List, Optional
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.exceptions import ValidationFailed
from app.models.user import User
from app.schemas import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """Service for user-related operations"""
    
    def __init__(self, db: Session):
        """
        Initialize user service
        
        Args:
            db: Database session
        """
        self.db = db
    
    def get_user_by_clerk_id(self, clerk_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.clerk_id == clerk_id).first()
    
    def get_users_except(self, clerk_id: str) -> List[User]:
        """
        Get every user other than the caller
        
        Args:
            clerk_id: Identity provider id of the caller
            
        Returns:
            List of User instances
        """
        return self.db.query(User).filter(User.clerk_id != clerk_id).order_by(User.full_name).all()
    
    def ensure_user(self, clerk_id: str, first_name: str, last_name: str, image_url: Optional[str]) -> User:
        """
        Record a user after sign-in, leaving existing users untouched
        
        Returns:
            Existing or created User instance
        """
        existing = self.get_user_by_clerk_id(clerk_id)
        if existing:
            return existing
        
        full_name = " ".join(part for part in (first_name, last_name) if part)
        try:
            data = UserCreate(clerk_id=clerk_id, full_name=full_name, image_url=image_url)
        except ValidationError as e:
            raise ValidationFailed({str(err["loc"][0]): err["msg"] for err in e.errors()}) from e
        
        user = User(clerk_id=data.clerk_id, full_name=data.full_name, image_url=data.image_url)
        self.db.add(user)
        self.db.commit()
        logger.info(f"Created user {user.clerk_id}")
        return user
