# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated, Any

from fastapi import Depends

from app.auth import AuthUser, get_admin_user, get_current_user
from core.competition import CompetitionRules, get_rules


def get_competition_rules() -> CompetitionRules:
    """Rules for the configured competition year."""
    return get_rules()


# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
AdminJudge = Annotated[dict[str, Any], Depends(get_admin_user)]
RulesDep = Annotated[CompetitionRules, Depends(get_competition_rules)]
