# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class RoleResponse(BaseModel):
    """
    The caller's roles in the competition.

    A person can be both a supplier and a judge (supplier judges), and
    admins are judges with type "admin".
    """
    id: UUID
    email: Optional[str] = None
    judge_id: Optional[str] = None
    judge_type: Optional[str] = None
    judge_active: bool = False
    supplier_id: Optional[str] = None
    is_admin: bool = False
