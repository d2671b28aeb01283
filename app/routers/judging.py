# =============================================================================
# app/routers/judging.py - Judge Scoring Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUser
from core.models.scoring import ScoreSubmission
from core.services.scoring_service import ScoringService

router = APIRouter()


@router.post("/judging/scores")
async def submit_scores(submission: ScoreSubmission, user: CurrentUser):
    """
    Submit the caller's scores for one or more sauces.

    All-or-nothing: if any sauce was already scored by this judge, nothing
    is stored and a 409 is returned.
    """
    stored = ScoringService.submit_scores(user.email, submission)
    return {"success": True, "scores_stored": stored}
