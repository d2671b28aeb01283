# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup and login are handled by Supabase Auth client-side (magic links).
# These routes tell the dashboard who the caller is.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, RoleResponse
from core.models.sauce import JudgeType
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=RoleResponse)
async def get_current_user_roles(
    user: AuthUser = Depends(get_current_user)
) -> RoleResponse:
    """
    Get the current user's judge and supplier roles.

    Returns:
        RoleResponse: Which dashboards the user may see

    Raises:
        401: If not authenticated
    """
    if not user.email:
        return RoleResponse(id=user.id)

    judge = SupabaseClient.fetch_judge_by_email(user.email)
    supplier = SupabaseClient.fetch_supplier_by_email(user.email)

    return RoleResponse(
        id=user.id,
        email=user.email,
        judge_id=str(judge["id"]) if judge else None,
        judge_type=judge.get("type") if judge else None,
        judge_active=bool(judge and judge.get("active")),
        supplier_id=str(supplier["id"]) if supplier else None,
        is_admin=bool(judge and judge.get("type") == JudgeType.ADMIN.value),
    )
