from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from edu_ai_insight.core.survey_schema import NO_TOOL_OPTION, SurveyResponse, normalize_rating

STEM_SUBJECTS = frozenset({"수학", "과학", "기술가정"})
HUMANITIES_SUBJECTS = frozenset({"국어", "영어", "사회"})

TEN_PLUS_YEARS = frozenset({"10~19년", "20년 이상"})
TWENTY_PLUS_YEARS = "20년 이상"
MID_CAREER = "4~9년"
NEW_TEACHER = "1~3년"

LEADING_MIN_TOOLS = 3
LEADING_MIN_RATING = 4.5
CAUTIOUS_MAX_TOOLS = 1


class SegmentId(str, Enum):
    AI_LEADING = "ai_leading"
    AI_CAUTIOUS = "ai_cautious"
    AI_INTERESTED = "ai_interested"
    AI_EXPLORING = "ai_exploring"
    UNSEGMENTED = "unsegmented"


@dataclass(frozen=True)
class SegmentProfile:
    """Display text for one teacher segment."""
    segment: SegmentId
    title: str
    audience: str
    traits: Tuple[str, ...]


SEGMENT_PROFILES: Dict[SegmentId, SegmentProfile] = {
    SegmentId.AI_LEADING: SegmentProfile(
        SegmentId.AI_LEADING,
        "🌟 AI 선도형",
        "경력 10년+ STEM 교사",
        ("AI 도구 3개+ 사용", "긍정 인식도 4.5+", "자료제작에 활용"),
    ),
    SegmentId.AI_INTERESTED: SegmentProfile(
        SegmentId.AI_INTERESTED,
        "📚 AI 관심형",
        "경력 4-9년 전교과",
        ("AI 도구 1-2개 사용", "연수 욕구 높음", "시험문제 생성 관심"),
    ),
    SegmentId.AI_EXPLORING: SegmentProfile(
        SegmentId.AI_EXPLORING,
        "🤔 AI 탐색형",
        "경력 1-3년 신규교사",
        ("ChatGPT 위주 사용", "업무 효율화 목적", "가이드라인 필요"),
    ),
    SegmentId.AI_CAUTIOUS: SegmentProfile(
        SegmentId.AI_CAUTIOUS,
        "⚠️ AI 신중형",
        "경력 20년+ 인문계",
        ("AI 도구 사용 적음", "교육윤리 우려", "체계적 연수 필요"),
    ),
}


@dataclass(frozen=True)
class InsightHighlight:
    label: str
    headline: str


# Summary cards shown above the charts on the insights page.
INSIGHT_HIGHLIGHTS: Tuple[InsightHighlight, ...] = (
    InsightHighlight("주요 발견", "경력 ↑ AI 인식 ↑"),
    InsightHighlight("교과목 격차", "STEM > 인문계"),
    InsightHighlight("타겟 그룹", "신규 교사 지원"),
)


@dataclass(frozen=True)
class PolicyRecommendation:
    title: str
    items: Tuple[str, ...]


POLICY_RECOMMENDATIONS_TITLE = "📋 정책 제안 및 시사점"

POLICY_RECOMMENDATIONS: Tuple[PolicyRecommendation, ...] = (
    PolicyRecommendation(
        "🎯 맞춤형 연수 설계",
        (
            "신규교사: 기초 활용법 중심",
            "경력교사: 고급 기능 및 윤리",
            "STEM: 전문도구 활용법",
            "인문계: 창의적 활용 방안",
        ),
    ),
    PolicyRecommendation(
        "🔧 지원 방안",
        (
            "학교별 AI 리더 교사 양성",
            "교과목별 AI 활용 가이드라인",
            "정기적 성과 공유 워크샵",
            "AI 윤리 교육 프로그램",
        ),
    ),
)


def tools_in_use(response: SurveyResponse) -> int:
    """Number of tools checked, not counting the explicit "none" box."""
    return sum(1 for tool in (response.ai_tools_used or []) if tool != NO_TOOL_OPTION)


def _is_leading(r: SurveyResponse) -> bool:
    return (
        r.experience_years in TEN_PLUS_YEARS
        and r.subject in STEM_SUBJECTS
        and tools_in_use(r) >= LEADING_MIN_TOOLS
        and normalize_rating(r.ai_positive_rating) >= LEADING_MIN_RATING
    )


def _is_cautious(r: SurveyResponse) -> bool:
    return (
        r.experience_years == TWENTY_PLUS_YEARS
        and r.subject in HUMANITIES_SUBJECTS
        and tools_in_use(r) <= CAUTIOUS_MAX_TOOLS
    )


def _is_interested(r: SurveyResponse) -> bool:
    return r.experience_years == MID_CAREER and 1 <= tools_in_use(r) <= 2


def _is_exploring(r: SurveyResponse) -> bool:
    return r.experience_years == NEW_TEACHER


# Checked top to bottom; the first match wins.
SEGMENT_RULES: List[Tuple[SegmentId, Callable[[SurveyResponse], bool]]] = [
    (SegmentId.AI_LEADING, _is_leading),
    (SegmentId.AI_CAUTIOUS, _is_cautious),
    (SegmentId.AI_INTERESTED, _is_interested),
    (SegmentId.AI_EXPLORING, _is_exploring),
]


def classify(response: SurveyResponse) -> SegmentId:
    for segment, rule in SEGMENT_RULES:
        if rule(response):
            return segment
    return SegmentId.UNSEGMENTED


def segment_distribution(responses: Sequence[SurveyResponse]) -> Dict[SegmentId, int]:
    """Responses per segment, in rule order with UNSEGMENTED last. Zero counts are kept."""
    counts: Dict[SegmentId, int] = {segment: 0 for segment, _ in SEGMENT_RULES}
    counts[SegmentId.UNSEGMENTED] = 0
    for r in responses:
        counts[classify(r)] += 1
    return counts
