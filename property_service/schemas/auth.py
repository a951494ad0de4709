from pydantic import BaseModel
from typing import Optional


class AuthenticatedUser(BaseModel):
    """Identity resolved from a bearer token for the current request."""

    id: str
    email: Optional[str] = None
    role: Optional[str] = None


class LoginLinkRequest(BaseModel):
    email: Optional[str] = None
