"""Shared fixtures: response factory and an in-memory response store."""
from typing import List

import pytest

from edu_ai_insight.core.response_store import StoreError
from edu_ai_insight.core.survey_schema import SurveyResponse


def make_response(**overrides) -> SurveyResponse:
    values = dict(
        subject="수학",
        location="서울특별시",
        school_name="한빛중학교",
        employment_type="정교사",
        experience_years="4~9년",
        main_concern="수업자료를 준비할 시간이 부족합니다.",
        problems=["수업자료 제작 시간 부족"],
        ai_tools_used=["ChatGPT"],
        ai_usage_purpose=["수업자료 제작"],
        interested_ai_areas=["AI로 맞춤형 수업자료 설계"],
        ai_positive_rating=4,
        support_needed="교과별 활용 가이드가 필요합니다.",
    )
    values.update(overrides)
    return SurveyResponse(**values)


class InMemoryResponseStore:
    """Stands in for ResponseStoreClient; newest insert is returned first."""

    def __init__(self, responses: List[SurveyResponse] = None, fail_reads: bool = False, fail_writes: bool = False):
        self.responses = list(responses or [])
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.fetch_calls = 0

    def fetch_all(self) -> List[SurveyResponse]:
        self.fetch_calls += 1
        if self.fail_reads:
            raise StoreError("store unavailable")
        return list(self.responses)

    def insert(self, record: SurveyResponse) -> None:
        if self.fail_writes:
            raise StoreError("constraint violation")
        self.responses.insert(0, record)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def store_factory():
    return InMemoryResponseStore


@pytest.fixture
def valid_form():
    return {
        "subject": "과학",
        "location": "부산광역시",
        "school_name": "바다고등학교",
        "employment_type": "기간제교사",
        "experience_years": "1~3년",
        "main_concern": "학생들의 집중력이 많이 떨어졌습니다.",
        "problems": ["학생들의 집중력 저하", "행정업무 과다"],
        "ai_tools_used": [],
        "ai_usage_purpose": [],
        "interested_ai_areas": ["학생 학습 데이터 분석"],
        "ai_positive_rating": "3",
        "support_needed": "기초 활용 연수가 필요합니다.",
    }
