"""Caller identity and admin checks backed by the identity provider (Clerk)"""
from typing import Optional
import logging

import requests
from fastapi import Depends, Header
from jose import JWTError, jwt

from app.config import settings
from app.exceptions import Forbidden, IdentityLookupFailed, Unauthorized

logger = logging.getLogger(__name__)


class IdentityProvider:
    """
    Thin client for the identity provider's user API
    
    Args:
        api_url: Base URL of the backend API
        secret_key: Secret key used as bearer credential
        timeout: Seconds to wait for the provider
    """
    
    def __init__(self, api_url: str, secret_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip("/")
        self.secret_key = secret_key
        self.timeout = timeout
        self.session = session or requests.Session()
    
    def get_primary_email(self, user_id: str) -> Optional[str]:
        """
        Look up the caller's primary email address
        
        Returns:
            Email address, or None when the user has none
        """
        try:
            response = self.session.get(
                f"{self.api_url}/users/{user_id}",
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            user = response.json()
        except (requests.RequestException, ValueError) as e:
            raise IdentityLookupFailed(detail=f"user lookup for {user_id} failed: {e}") from e
        
        primary_id = user.get("primary_email_address_id")
        for address in user.get("email_addresses") or []:
            if address.get("id") == primary_id:
                return address.get("email_address")
        return None
    
    def is_admin(self, user_id: str, admin_email: str) -> bool:
        if not admin_email:
            return False
        return self.get_primary_email(user_id) == admin_email


def get_identity_provider() -> IdentityProvider:
    """Dependency returning the configured identity provider client"""
    return IdentityProvider(settings.clerk_api_url, settings.clerk_secret_key)


def decode_session_token(token: str, key: str) -> str:
    """
    Verify a session token and return the caller id (``sub`` claim)
    
    Raises:
        Unauthorized: If the token is invalid or carries no subject
    """
    try:
        claims = jwt.decode(token, key, algorithms=["RS256"], options={"verify_aud": False})
    except JWTError as e:
        raise Unauthorized(detail=str(e)) from e
    
    subject = claims.get("sub")
    if not subject:
        raise Unauthorized(detail="token has no subject")
    return subject


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Dependency resolving the authenticated caller id from the bearer token"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized()
    return decode_session_token(authorization.split(" ", 1)[1].strip(), settings.clerk_jwt_key)


def require_admin(
    user_id: str = Depends(get_current_user_id),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> str:
    """Dependency allowing only the configured administrator through"""
    if not provider.is_admin(user_id, settings.admin_email):
        logger.warning(f"Rejected non-admin caller {user_id}")
        raise Forbidden()
    return user_id
