from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

# ---------------------------------------------------------------------------
# Option catalogs (as presented on the intake form)
# ---------------------------------------------------------------------------

SUBJECTS = ["국어", "영어", "수학", "과학", "사회", "예체능", "기술가정", "기타"]

LOCATIONS = [
    "서울특별시",
    "부산광역시",
    "대구광역시",
    "인천광역시",
    "광주광역시",
    "대전광역시",
    "울산광역시",
    "세종특별자치시",
    "경기도",
    "강원도",
    "충청북도",
    "충청남도",
    "전라북도",
    "전라남도",
    "경상북도",
    "경상남도",
    "제주특별자치도",
]

EMPLOYMENT_TYPES = ["정교사", "기간제교사", "시간강사", "기타"]

EXPERIENCE_BRACKETS = ["1~3년", "4~9년", "10~19년", "20년 이상"]

PROBLEM_OPTIONS = [
    "수업자료 제작 시간 부족",
    "학생들의 집중력 저하",
    "수행평가/서술형 채점의 어려움",
    "교육격차 확대",
    "AI 활용에 대한 정보 부족",
    "행정업무 과다",
]

# "없음" is the explicit "no tools" checkbox.
AI_TOOL_OPTIONS = [
    "ChatGPT",
    "Notion AI",
    "Grammarly",
    "뤼튼(Wrtn)",
    "큐레이션봇",
    "클래스카드 AI",
    "Google Bard",
    "Claude",
    "없음",
]
NO_TOOL_OPTION = "없음"

AI_USAGE_PURPOSE_OPTIONS = [
    "수업자료 제작",
    "시험문제 생성",
    "학생 피드백 작성",
    "행정문서/공문 작성",
    "교사 연수/학습",
    "아이디어 브레인스토밍",
    "번역/문법 검사",
    "사용하지 않음",
]

INTERESTED_AI_AREA_OPTIONS = [
    "AI로 시험지/평가문항 자동 생성",
    "AI로 맞춤형 수업자료 설계",
    "학생 학습 데이터 분석",
    "AI 이미지/영상/프레젠테이션 제작",
    "AI 채팅봇 제작",
    "AI를 활용한 학습 피드백",
    "AI 음성인식 및 발음 교정",
    "AI 번역 및 언어학습",
    "AI 코딩 및 프로그래밍",
    "AI 윤리 및 디지털 시민의식",
]

MIN_RATING = 1
MAX_RATING = 5
MIN_FREE_TEXT_LENGTH = 10

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

# ---------------------------------------------------------------------------
# Landing page copy
# ---------------------------------------------------------------------------

SURVEY_TAGLINE = "교사 대상 AI 활용 인식 및 수요 설문 플랫폼"

# (title, description) per survey goal
SURVEY_PURPOSES = [
    ("교육현장 고민", "현재 교육 현장에서의 고민과 해결과제 파악"),
    ("AI 활용 현황", "현재 사용 중인 AI 서비스 및 활용 목적 분석"),
    ("학습 희망 영역", "관심 있는 AI 기술 분야 및 학습 희망 영역 도출"),
    ("연수 기획", "AI 연수 및 교육솔루션 개발을 위한 기초 데이터 확보"),
]

SURVEY_NOTICES = [
    "⏱️ 예상 소요시간: 5-7분",
    "🔒 개인정보는 익명으로 처리됩니다",
    "📊 결과는 교육 연구 목적으로만 사용됩니다",
]


class InvalidRecordError(ValueError):
    """Raised when a stored row carries a field of the wrong shape."""


class InvalidRatingError(InvalidRecordError):
    """Raised when ai_positive_rating cannot be normalized to an integer in [1, 5]."""


class SubmissionValidationError(ValueError):
    """Raised when a submitted form fails the intake rules."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        fields = ", ".join(self.field_errors)
        super().__init__(f"Invalid survey submission ({fields})")


def normalize_rating(value: Any) -> int:
    """
    Normalize a rating to an int in [1, 5].

    Ratings arrive from the form and from older rows as numeric strings
    ("4"); newer rows carry real integers. Anything that is not a base-10
    integer in range is rejected instead of being carried along as NaN.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidRatingError(f"Rating is missing or not numeric: {value!r}")

    if isinstance(value, int):
        rating = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidRatingError(f"Rating is not a whole number: {value!r}")
        rating = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _INTEGER_TEXT.fullmatch(text):
            raise InvalidRatingError(f"Rating is not a base-10 integer: {value!r}")
        rating = int(text, 10)
    else:
        raise InvalidRatingError(f"Unsupported rating type {type(value).__name__}: {value!r}")

    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRatingError(f"Rating {rating} outside {MIN_RATING}..{MAX_RATING}")
    return rating


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _string_list(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise InvalidRecordError(f"Expected a list of options, got {type(value).__name__}: {value!r}")
    return tuple(str(v) for v in value)


_LIST_FIELDS = ("problems", "ai_tools_used", "ai_usage_purpose", "interested_ai_areas")


@dataclass(frozen=True)
class SurveyResponse:
    """
    One completed survey submission.

    id and created_at are assigned by the store and are None for a record
    that has not been inserted yet. Multi-select answers are stored as
    tuples, so instances are immutable and hashable.
    """
    subject: str
    location: str
    school_name: str
    employment_type: str
    experience_years: str
    main_concern: str
    problems: Tuple[str, ...]
    ai_tools_used: Tuple[str, ...]
    ai_usage_purpose: Tuple[str, ...]
    interested_ai_areas: Tuple[str, ...]
    ai_positive_rating: int
    support_needed: str
    id: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self) -> None:
        for name in _LIST_FIELDS:
            object.__setattr__(self, name, _string_list(getattr(self, name)))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SurveyResponse":
        """
        Build a response from a store row.

        Missing list columns become empty tuples and missing text columns
        become "". A list column holding anything but a list raises
        InvalidRecordError, and a malformed rating raises InvalidRatingError.
        """
        raw_id = record.get("id")
        return cls(
            subject=_text(record.get("subject")),
            location=_text(record.get("location")),
            school_name=_text(record.get("school_name")),
            employment_type=_text(record.get("employment_type")),
            experience_years=_text(record.get("experience_years")),
            main_concern=_text(record.get("main_concern")),
            problems=_string_list(record.get("problems")),
            ai_tools_used=_string_list(record.get("ai_tools_used")),
            ai_usage_purpose=_string_list(record.get("ai_usage_purpose")),
            interested_ai_areas=_string_list(record.get("interested_ai_areas")),
            ai_positive_rating=normalize_rating(record.get("ai_positive_rating")),
            support_needed=_text(record.get("support_needed")),
            id=None if raw_id is None else str(raw_id),
            created_at=record.get("created_at"),
        )

    def to_record(self) -> Dict[str, Any]:
        """Insert payload. id and created_at are left to the store."""
        return {
            "subject": self.subject,
            "location": self.location,
            "school_name": self.school_name,
            "employment_type": self.employment_type,
            "experience_years": self.experience_years,
            "main_concern": self.main_concern,
            "problems": list(self.problems),
            "ai_tools_used": list(self.ai_tools_used),
            "ai_usage_purpose": list(self.ai_usage_purpose),
            "interested_ai_areas": list(self.interested_ai_areas),
            "ai_positive_rating": normalize_rating(self.ai_positive_rating),
            "support_needed": self.support_needed,
        }


# ---------------------------------------------------------------------------
# Submission validation (intake form rules)
# ---------------------------------------------------------------------------

_REQUIRED_SELECTS = {
    "subject": (SUBJECTS, "교과목을 선택해주세요"),
    "location": (LOCATIONS, "근무지를 입력해주세요"),
    "employment_type": (EMPLOYMENT_TYPES, "근무형태를 선택해주세요"),
    "experience_years": (EXPERIENCE_BRACKETS, "교직경력을 선택해주세요"),
}

_CHECKLISTS = {
    "problems": (PROBLEM_OPTIONS, True),
    "ai_tools_used": (AI_TOOL_OPTIONS, False),
    "ai_usage_purpose": (AI_USAGE_PURPOSE_OPTIONS, False),
    "interested_ai_areas": (INTERESTED_AI_AREA_OPTIONS, True),
}


def validate_submission(form: Mapping[str, Any]) -> SurveyResponse:
    """
    Check a submitted form and return the record to insert.

    All problems are collected before raising so the form can show every
    field error at once.
    """
    errors: Dict[str, str] = {}

    for name, (options, message) in _REQUIRED_SELECTS.items():
        value = _text(form.get(name))
        if not value:
            errors[name] = message
        elif value not in options:
            errors[name] = f"알 수 없는 값입니다: {value}"

    if not _text(form.get("school_name")).strip():
        errors["school_name"] = "학교명을 입력해주세요"

    for name in ("main_concern", "support_needed"):
        if len(_text(form.get(name)).strip()) < MIN_FREE_TEXT_LENGTH:
            errors[name] = f"{MIN_FREE_TEXT_LENGTH}자 이상 입력해주세요"

    for name, (options, required) in _CHECKLISTS.items():
        try:
            values = _string_list(form.get(name))
        except InvalidRecordError:
            errors[name] = "목록 형식이 올바르지 않습니다"
            continue
        unknown = [v for v in values if v not in options]
        if unknown:
            errors[name] = f"알 수 없는 항목입니다: {', '.join(unknown)}"
        elif required and not values:
            errors[name] = "최소 1개 이상 선택해주세요"

    try:
        rating = normalize_rating(form.get("ai_positive_rating"))
    except InvalidRatingError:
        errors["ai_positive_rating"] = "평점을 선택해주세요"
        rating = MIN_RATING

    if errors:
        raise SubmissionValidationError(errors)

    return SurveyResponse(
        subject=_text(form.get("subject")),
        location=_text(form.get("location")),
        school_name=_text(form.get("school_name")).strip(),
        employment_type=_text(form.get("employment_type")),
        experience_years=_text(form.get("experience_years")),
        main_concern=_text(form.get("main_concern")).strip(),
        problems=_string_list(form.get("problems")),
        ai_tools_used=_string_list(form.get("ai_tools_used")),
        ai_usage_purpose=_string_list(form.get("ai_usage_purpose")),
        interested_ai_areas=_string_list(form.get("interested_ai_areas")),
        ai_positive_rating=rating,
        support_needed=_text(form.get("support_needed")).strip(),
    )
