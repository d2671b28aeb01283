# =============================================================================
# core/models/scoring.py - Judging Score Schemas
# =============================================================================

from pydantic import BaseModel, Field


class SauceScores(BaseModel):
    """
    A judge's scores for one sauce, keyed by judging category ID.

    Example:
        {
            "sauceId": "2b0d...",
            "scores": {"appearance": 7, "aroma": 8, "taste": 9},
            "comment": "Great heat build-up"
        }
    """
    sauce_id: str = Field(..., alias="sauceId", min_length=1)
    scores: dict[str, float] = Field(default_factory=dict)
    comment: str = ""

    model_config = {"populate_by_name": True}


class ScoreSubmission(BaseModel):
    """Body for POST /judging/scores."""
    sauces: list[SauceScores] = Field(default_factory=list)
