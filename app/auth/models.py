# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel
from uuid import UUID
from typing import Optional


ADMIN_ROLE = "admin"


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. The role comes from the token's
    app_metadata claim, which only the service role can write.
    """
    id: UUID
    email: Optional[str] = None
    role: str = "client"

    class Config:
        frozen = True  # Make immutable

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes the profile columns of the public.users table.
    """
    id: UUID
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "client"
