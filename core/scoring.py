# =============================================================================
# core/scoring.py - Judging Score Aggregation
# =============================================================================
# Turns raw judging score rows into the final results table:
#
# 1. Group scores by sauce, then by judge type (pro / community / supplier)
# 2. Mean score per judge type
# 3. Final score = sum(mean * count * weight) / sum(count * weight)
#    over the judge types that scored the sauce
#
# Judge types without scores show "N/A" and don't contribute.
#
# Usage:
#   df = aggregate_scores(rows, rules.judge_weights)
#   csv_text = results_to_csv(df)
# =============================================================================

import csv
import io
import logging
from typing import Any, Iterable

import pandas as pd

logger = logging.getLogger(__name__)

SCORED_JUDGE_TYPES = ("pro", "community", "supplier")

RESULT_COLUMNS = [
    "Brand",
    "Sauce",
    "Final Weighted Score",
    "Avg Pro Score",
    "Avg Community Score",
    "Avg Supplier Score",
]

NOT_AVAILABLE = "N/A"


def _avg_column(judge_type: str) -> str:
    return f"Avg {judge_type.capitalize()} Score"


def aggregate_scores(
    rows: Iterable[dict[str, Any]],
    weights: dict[str, float],
) -> pd.DataFrame:
    """
    Aggregate score rows into one result row per sauce.

    Args:
        rows: Dicts with keys sauce_id, sauce_name, brand_name, judge_type, score.
            Rows with a judge type outside pro/community/supplier or a
            missing score are ignored.
        weights: Weight per judge type, e.g. {"pro": 0.8, "community": 1.5, "supplier": 0.8}

    Returns:
        DataFrame with RESULT_COLUMNS (+ sauce_id), sorted by final score
        descending. Scores are floats; missing group averages are NaN.

    Example:
        pro [80, 90], community [70], weights pro 0.8 / community 1.5:
        (85*2*0.8 + 70*1*1.5) / (2*0.8 + 1*1.5) = 241 / 3.1 = 77.74
    """
    df = pd.DataFrame(
        list(rows),
        columns=["sauce_id", "sauce_name", "brand_name", "judge_type", "score"],
    )

    df = df[df["judge_type"].isin(SCORED_JUDGE_TYPES)]
    df = df.assign(score=pd.to_numeric(df["score"], errors="coerce")).dropna(subset=["score"]).copy()

    if df.empty:
        return pd.DataFrame(columns=["sauce_id", *RESULT_COLUMNS])

    df["sauce_name"] = df["sauce_name"].fillna("Unknown Sauce")
    df["brand_name"] = df["brand_name"].fillna("Unknown Brand")

    groups = (
        df.groupby(["sauce_id", "judge_type"])["score"]
        .agg(["mean", "count"])
        .reset_index()
    )
    groups["weight"] = groups["judge_type"].map(weights).fillna(0.0)
    groups["weighted_sum"] = groups["mean"] * groups["count"] * groups["weight"]
    groups["weight_divisor"] = groups["count"] * groups["weight"]

    totals = groups.groupby("sauce_id")[["weighted_sum", "weight_divisor"]].sum()
    final = (totals["weighted_sum"] / totals["weight_divisor"]).where(totals["weight_divisor"] > 0, 0.0)

    means = groups.pivot(index="sauce_id", columns="judge_type", values="mean")
    labels = df.groupby("sauce_id")[["brand_name", "sauce_name"]].first()

    result = pd.DataFrame({
        "sauce_id": labels.index,
        "Brand": labels["brand_name"].values,
        "Sauce": labels["sauce_name"].values,
        "Final Weighted Score": final.reindex(labels.index).values,
    })
    for judge_type in SCORED_JUDGE_TYPES:
        column = means[judge_type] if judge_type in means.columns else pd.Series(dtype=float)
        result[_avg_column(judge_type)] = column.reindex(labels.index).values

    result = result.sort_values("Final Weighted Score", ascending=False, kind="stable")
    logger.debug(f"Aggregated scores for {len(result)} sauces")
    return result.reset_index(drop=True)


def _format_score(value: Any) -> str:
    if value is None or pd.isna(value):
        return NOT_AVAILABLE
    return f"{float(value):.2f}"


def results_to_csv(results: pd.DataFrame) -> str:
    """
    Render aggregated results as CSV.

    Columns are fixed: Brand, Sauce, Final Weighted Score, Avg Pro Score,
    Avg Community Score, Avg Supplier Score. Scores are two-decimal strings;
    empty groups print "N/A". Values containing commas are quoted.
    """
    formatted = pd.DataFrame({
        "Brand": results["Brand"].astype(str) if len(results) else [],
        "Sauce": results["Sauce"].astype(str) if len(results) else [],
    })
    for column in RESULT_COLUMNS[2:]:
        formatted[column] = [_format_score(v) for v in results[column]] if len(results) else []

    buffer = io.StringIO()
    formatted[RESULT_COLUMNS].to_csv(
        buffer,
        index=False,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    return buffer.getvalue().rstrip("\n")
