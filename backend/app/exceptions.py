"""Catalog error taxonomy

Every error raised by the services derives from :class:`CatalogError` and
carries the HTTP status the API layer answers with. ``public_message`` is safe
to show to any caller; ``detail`` holds the underlying cause and is only
surfaced outside production.
"""
from typing import Dict, Optional


class CatalogError(Exception):
    """Base class for all catalog errors"""
    
    status_code = 500
    public_message = "Internal server error"
    
    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.public_message
        self.detail = detail
        super().__init__(self.message)


class ValidationFailed(CatalogError):
    """A create request carried invalid fields"""
    
    status_code = 400
    public_message = "Validation failed"
    
    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(message or f"Invalid field(s): {fields}")


class MissingMedia(ValidationFailed):
    """A required media payload was not attached to the request"""
    
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            {name: "file is required" for name in self.missing},
            message="Please upload all files",
        )


class NotFound(CatalogError):
    status_code = 404
    
    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} not found")


class MediaUploadFailed(CatalogError):
    """The blob store rejected an upload or could not be reached"""
    
    status_code = 500
    public_message = "Media upload failed"


class StatsUnavailable(CatalogError):
    status_code = 500
    public_message = "Statistics are unavailable"


class IdentityLookupFailed(CatalogError):
    status_code = 500
    public_message = "Could not verify caller"


class Unauthorized(CatalogError):
    status_code = 401
    public_message = "Unauthorized - you must be logged in"


class Forbidden(CatalogError):
    status_code = 403
    public_message = "Access denied - admin privileges required"


class RequestTimedOut(CatalogError):
    status_code = 504
    public_message = "Request timed out"


class UpdateConflict(CatalogError):
    """A record kept changing underneath an update"""
    
    status_code = 409
    public_message = "Resource was modified concurrently, please retry"
