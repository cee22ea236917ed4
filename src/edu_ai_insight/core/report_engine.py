from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from edu_ai_insight.config import TOP_TOOLS_LIMIT
from edu_ai_insight.core.aggregation import (
    DashboardStats,
    ExperienceCorrelation,
    SubjectTrend,
    build_dashboard_stats,
    experience_correlations,
    subject_trends,
    top_tools,
)
from edu_ai_insight.core.response_store import StoreError
from edu_ai_insight.core.segments import SegmentId, segment_distribution
from edu_ai_insight.core.survey_schema import (
    SubmissionValidationError,
    SurveyResponse,
    validate_submission,
)

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "데이터를 불러오지 못했습니다. 잠시 후 다시 시도해주세요."
SUBMIT_ERROR_MESSAGE = "설문 제출 중 오류가 발생했습니다. 다시 시도해주세요."
SUBMIT_INVALID_MESSAGE = "입력 내용을 확인해주세요."
SUBMIT_OK_MESSAGE = "소중한 의견을 주셔서 감사합니다."


class ResponseStore(Protocol):
    def fetch_all(self) -> List[SurveyResponse]: ...

    def insert(self, record: SurveyResponse) -> None: ...


@dataclass
class DashboardReport:
    responses: List[SurveyResponse]
    stats: DashboardStats
    top_tools: List[Tuple[str, int]]
    error: Optional[str] = None


@dataclass
class InsightReport:
    response_count: int
    correlations: List[ExperienceCorrelation]
    trends: List[SubjectTrend]
    segments: Dict[SegmentId, int]
    error: Optional[str] = None


@dataclass
class SubmissionOutcome:
    ok: bool
    message: str
    field_errors: Dict[str, str] = field(default_factory=dict)


def _load_responses(store: ResponseStore) -> Tuple[List[SurveyResponse], Optional[str]]:
    """
    One fetch per view load. A store failure is logged and reported as
    "no data" so the page still renders.
    """
    try:
        return store.fetch_all(), None
    except StoreError as exc:
        logger.error("Could not load survey responses: %s", exc)
        return [], LOAD_ERROR_MESSAGE


def run_dashboard_report(store: ResponseStore) -> DashboardReport:
    responses, error = _load_responses(store)
    stats = build_dashboard_stats(responses)
    return DashboardReport(
        responses=responses,
        stats=stats,
        top_tools=top_tools(stats.by_ai_tools, limit=TOP_TOOLS_LIMIT),
        error=error,
    )


def run_insight_report(store: ResponseStore) -> InsightReport:
    responses, error = _load_responses(store)
    return InsightReport(
        response_count=len(responses),
        correlations=experience_correlations(responses),
        trends=subject_trends(responses),
        segments=segment_distribution(responses),
        error=error,
    )


def submit_survey(store: ResponseStore, form: Mapping[str, Any]) -> SubmissionOutcome:
    """
    Validate a form and insert it.

    Invalid forms never reach the store. A store failure is reported as a
    single generic retry prompt; nothing is queued or kept locally.
    """
    try:
        record = validate_submission(form)
    except SubmissionValidationError as exc:
        logger.info("Submission rejected by validation: %s", sorted(exc.field_errors))
        return SubmissionOutcome(ok=False, message=SUBMIT_INVALID_MESSAGE, field_errors=exc.field_errors)

    try:
        store.insert(record)
    except StoreError as exc:
        logger.error("Survey submission failed: %s", exc)
        return SubmissionOutcome(ok=False, message=SUBMIT_ERROR_MESSAGE)

    return SubmissionOutcome(ok=True, message=SUBMIT_OK_MESSAGE)
