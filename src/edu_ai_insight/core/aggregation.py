from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from itertools import chain
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from edu_ai_insight.config import AVERAGE_DECIMAL_PLACES, TOP_TOOLS_LIMIT
from edu_ai_insight.core.survey_schema import SurveyResponse, normalize_rating

# Working frame columns
SUBJECT_COL = "subject"
LOCATION_COL = "location"
EXPERIENCE_COL = "experience_years"
RATING_COL = "rating"
TOOLS_COL = "tools"
TOOL_COUNT_COL = "tool_count"
PROBLEMS_COL = "problems"

FRAME_COLUMNS = [
    SUBJECT_COL,
    LOCATION_COL,
    EXPERIENCE_COL,
    RATING_COL,
    TOOLS_COL,
    TOOL_COUNT_COL,
    PROBLEMS_COL,
]


@dataclass
class GroupAccumulator:
    """Per-label running totals shared by every grouped view."""
    count: int = 0
    rating_sum: int = 0
    tool_total: int = 0
    problems: List[str] = field(default_factory=list)


@dataclass
class DashboardStats:
    total: int
    by_subject: Dict[str, int]
    by_location: Dict[str, int]
    by_ai_tools: Dict[str, int]
    avg_rating: float
    avg_rating_display: str


@dataclass
class ExperienceCorrelation:
    experience: str
    avg_rating: str
    avg_ai_tools: str
    count: int


@dataclass
class SubjectTrend:
    subject: str
    avg_rating: str
    problem_count: int
    count: int


# ---------------------------------------------------------------------------
# Frame construction and the shared group-by helper
# ---------------------------------------------------------------------------

def responses_to_frame(responses: Sequence[SurveyResponse]) -> pd.DataFrame:
    """
    Flatten responses into one row each, keeping input order.

    Ratings are normalized here; a malformed rating raises InvalidRatingError.
    """
    records = []
    for r in responses:
        tools = list(r.ai_tools_used or [])
        records.append(
            {
                SUBJECT_COL: r.subject,
                LOCATION_COL: r.location,
                EXPERIENCE_COL: r.experience_years,
                RATING_COL: normalize_rating(r.ai_positive_rating),
                TOOLS_COL: tools,
                TOOL_COUNT_COL: len(tools),
                PROBLEMS_COL: list(r.problems or []),
            }
        )
    return pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)


def group_and_reduce(df: pd.DataFrame, key_col: str) -> Dict[str, GroupAccumulator]:
    """
    Group rows on key_col and fold each group into a GroupAccumulator.

    Keys are exact strings and come back in first-occurrence order
    (groupby with sort=False).
    """
    out: Dict[str, GroupAccumulator] = {}
    if df.empty:
        return out

    for key, grp in df.groupby(key_col, sort=False, dropna=False):
        out[str(key)] = GroupAccumulator(
            count=int(len(grp)),
            rating_sum=int(grp[RATING_COL].sum()),
            tool_total=int(grp[TOOL_COUNT_COL].sum()),
            problems=list(chain.from_iterable(grp[PROBLEMS_COL])),
        )
    return out


def _format_average(total: float, count: int) -> str:
    """Mean as a fixed-decimal string; exact halves round up (2.25 -> "2.3")."""
    quantum = Decimal(1).scaleb(-AVERAGE_DECIMAL_PLACES)
    mean = total / count if count > 0 else 0.0
    return str(Decimal(mean).quantize(quantum, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Category counts and averages
# ---------------------------------------------------------------------------

def _mean_rating(df: pd.DataFrame) -> float:
    if df.empty:
        return 0.0
    return float(df[RATING_COL].sum()) / len(df)


def count_tools(responses: Sequence[SurveyResponse]) -> Dict[str, int]:
    """
    Count each listed tool once per response that lists it.

    The total can exceed the number of responses (multi-select field).
    """
    return _tool_counts(responses_to_frame(responses))


def _tool_counts(df: pd.DataFrame) -> Dict[str, int]:
    if df.empty:
        return {}

    exploded = df[[TOOLS_COL]].explode(TOOLS_COL).dropna(subset=[TOOLS_COL])
    if exploded.empty:
        return {}

    counts = exploded.groupby(TOOLS_COL, sort=False).size()
    return {str(tool): int(n) for tool, n in counts.items()}


def average_rating(responses: Sequence[SurveyResponse]) -> float:
    """Arithmetic mean of normalized ratings; 0 for an empty set."""
    return _mean_rating(responses_to_frame(responses))


def top_tools(by_ai_tools: Dict[str, int], limit: int = TOP_TOOLS_LIMIT) -> List[Tuple[str, int]]:
    """
    Highest counts first. Ties keep their first-occurrence order since
    sorted() is stable.
    """
    ranked = sorted(by_ai_tools.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def build_dashboard_stats(responses: Sequence[SurveyResponse]) -> DashboardStats:
    df = responses_to_frame(responses)
    by_subject = group_and_reduce(df, SUBJECT_COL)
    by_location = group_and_reduce(df, LOCATION_COL)

    return DashboardStats(
        total=len(df),
        by_subject={k: acc.count for k, acc in by_subject.items()},
        by_location={k: acc.count for k, acc in by_location.items()},
        by_ai_tools=_tool_counts(df),
        avg_rating=_mean_rating(df),
        avg_rating_display=_format_average(int(df[RATING_COL].sum()), len(df)),
    )


# ---------------------------------------------------------------------------
# Insights: experience correlation and subject trends
# ---------------------------------------------------------------------------

def experience_correlations(responses: Sequence[SurveyResponse]) -> List[ExperienceCorrelation]:
    """
    Average rating vs. average number of tools, per experience bracket.

    Averages are rounded to one decimal place and kept as display strings.
    """
    groups = group_and_reduce(responses_to_frame(responses), EXPERIENCE_COL)
    return [
        ExperienceCorrelation(
            experience=bracket,
            avg_rating=_format_average(acc.rating_sum, acc.count),
            avg_ai_tools=_format_average(acc.tool_total, acc.count),
            count=acc.count,
        )
        for bracket, acc in groups.items()
    ]


def subject_trends(responses: Sequence[SurveyResponse]) -> List[SubjectTrend]:
    """Per-subject average rating and total (non-deduplicated) problem entries."""
    groups = group_and_reduce(responses_to_frame(responses), SUBJECT_COL)
    return [
        SubjectTrend(
            subject=subject,
            avg_rating=_format_average(acc.rating_sum, acc.count),
            problem_count=len(acc.problems),
            count=acc.count,
        )
        for subject, acc in groups.items()
    ]
