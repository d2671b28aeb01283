# =============================================================================
# core/services/scoring_service.py - Judging Scores Business Logic
# =============================================================================
# Handles score submission by judges and the admin results export.
# Aggregation itself lives in core/scoring.py.
# =============================================================================

import logging

from lib.supabase_client import SupabaseClient, is_unique_violation
from core.competition import get_rules
from core.models.scoring import ScoreSubmission
from core.scoring import aggregate_scores, results_to_csv
from core.services.access_service import AccessService
from app.exceptions import DuplicateScoreError, InvalidSubmissionError

logger = logging.getLogger(__name__)


class ScoringService:
    """Service for judging score operations."""

    @staticmethod
    def submit_scores(judge_email: str, submission: ScoreSubmission) -> int:
        """
        Store a judge's scores for one or more sauces.

        One row is written per (sauce, judging category). The whole batch is
        a single insert, so a duplicate anywhere rejects all of it.

        Args:
            judge_email: Email of the submitting judge
            submission: Scores keyed by sauce and category

        Returns:
            Number of score rows stored

        Raises:
            NotAuthorizedError: If the caller has no judge profile
            InvalidSubmissionError: If there are no scores
            DuplicateScoreError: If the judge already scored one of the sauces
        """
        judge = AccessService.require_judge(judge_email)

        rows = [
            {
                "sauce_id": entry.sauce_id,
                "judge_id": judge["id"],
                "category_id": category_id,
                "score": score,
                "comments": entry.comment,
            }
            for entry in submission.sauces
            for category_id, score in entry.scores.items()
        ]

        if not rows:
            raise InvalidSubmissionError("No scores to submit.")

        client = SupabaseClient.get_client()
        try:
            client.table("judging_scores").insert(rows).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateScoreError()
            logger.error(f"Failed to submit scores for judge {judge['id']}: {e}")
            raise

        logger.info(f"Judge {judge['id']} submitted {len(rows)} scores for {len(submission.sauces)} sauces")
        return len(rows)

    @staticmethod
    def export_results() -> str:
        """
        Final results as CSV, best sauce first.

        Raises:
            InvalidSubmissionError: If no scores exist yet
        """
        client = SupabaseClient.get_client()
        scores = (
            client.table("judging_scores")
            .select("sauce_id, judge_id, score")
            .execute()
        ).data or []

        if not scores:
            raise InvalidSubmissionError("No scores to export.")

        judges = SupabaseClient.fetch_by_ids("judges", [s["judge_id"] for s in scores], "id, type")
        sauces = SupabaseClient.fetch_by_ids("sauces", [s["sauce_id"] for s in scores], "id, name, supplier_id")
        suppliers = SupabaseClient.fetch_by_ids(
            "suppliers", [s.get("supplier_id") for s in sauces.values()], "id, brand_name"
        )

        rows = []
        for score in scores:
            sauce = sauces.get(str(score["sauce_id"]))
            judge = judges.get(str(score["judge_id"]))
            if not sauce or not judge:
                continue
            supplier = suppliers.get(str(sauce.get("supplier_id"))) or {}
            rows.append({
                "sauce_id": str(score["sauce_id"]),
                "sauce_name": sauce.get("name"),
                "brand_name": supplier.get("brand_name"),
                "judge_type": judge.get("type"),
                "score": score.get("score"),
            })

        results = aggregate_scores(rows, get_rules().judge_weights)
        logger.info(f"Exported results for {len(results)} sauces")
        return results_to_csv(results)
