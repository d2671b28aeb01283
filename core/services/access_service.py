# =============================================================================
# core/services/access_service.py - Role Checks
# =============================================================================
# Admin rights come from the judges table (type == "admin"), looked up by the
# caller's email on every request. Nothing is cached, so a demoted admin
# loses access immediately.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from core.models.sauce import JudgeType
from app.exceptions import NotAuthenticatedError, NotAuthorizedError

logger = logging.getLogger(__name__)


class AccessService:
    """Service for resolving the caller's role."""

    @staticmethod
    def require_admin(email: str | None) -> dict[str, Any]:
        """
        Ensure the caller is an admin.

        Args:
            email: Email from the caller's auth token

        Returns:
            The admin's judge row

        Raises:
            NotAuthenticatedError: If there is no caller email
            NotAuthorizedError: If the caller is not an admin judge
        """
        if not email:
            raise NotAuthenticatedError()

        judge = SupabaseClient.fetch_judge_by_email(email)
        if not judge or judge.get("type") != JudgeType.ADMIN.value:
            logger.warning(f"Rejected admin action for {email}")
            raise NotAuthorizedError()

        return judge

    @staticmethod
    def require_judge(email: str | None) -> dict[str, Any]:
        """
        Resolve the caller's judge profile.

        Raises:
            NotAuthenticatedError: If there is no caller email
            NotAuthorizedError: If no judge profile matches the email
        """
        if not email:
            raise NotAuthenticatedError()

        judge = SupabaseClient.fetch_judge_by_email(email)
        if not judge:
            raise NotAuthorizedError(
                "Unable to identify your judge profile. Please contact support."
            )
        return judge

    @staticmethod
    def require_supplier(email: str | None) -> dict[str, Any]:
        """
        Resolve the caller's supplier profile.

        Raises:
            NotAuthenticatedError: If there is no caller email
            NotAuthorizedError: If no supplier matches the email
        """
        if not email:
            raise NotAuthenticatedError()

        supplier = SupabaseClient.fetch_supplier_by_email(email)
        if not supplier:
            raise NotAuthorizedError("No supplier profile found for this account.")
        return supplier
