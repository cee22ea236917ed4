"""Tests for the teacher segment classifier."""
import pytest

from edu_ai_insight.core.segments import (
    INSIGHT_HIGHLIGHTS,
    POLICY_RECOMMENDATIONS,
    SEGMENT_PROFILES,
    SegmentId,
    classify,
    segment_distribution,
    tools_in_use,
)


class TestClassify:

    def test_leading(self, response_factory):
        r = response_factory(
            experience_years="10~19년",
            subject="과학",
            ai_tools_used=["ChatGPT", "Claude", "Notion AI"],
            ai_positive_rating=5,
        )
        assert classify(r) == SegmentId.AI_LEADING

    def test_leading_needs_top_rating(self, response_factory):
        r = response_factory(
            experience_years="20년 이상",
            subject="수학",
            ai_tools_used=["ChatGPT", "Claude", "Notion AI"],
            ai_positive_rating="4",
        )
        assert classify(r) == SegmentId.UNSEGMENTED

    def test_cautious(self, response_factory):
        r = response_factory(experience_years="20년 이상", subject="국어", ai_tools_used=["없음"], ai_positive_rating=2)
        assert classify(r) == SegmentId.AI_CAUTIOUS

    def test_interested(self, response_factory):
        r = response_factory(experience_years="4~9년", subject="예체능", ai_tools_used=["ChatGPT", "Grammarly"])
        assert classify(r) == SegmentId.AI_INTERESTED

    def test_interested_needs_some_tools(self, response_factory):
        r = response_factory(experience_years="4~9년", ai_tools_used=[])
        assert classify(r) == SegmentId.UNSEGMENTED

    def test_exploring(self, response_factory):
        r = response_factory(experience_years="1~3년", ai_tools_used=["ChatGPT"], ai_positive_rating=3)
        assert classify(r) == SegmentId.AI_EXPLORING

    def test_none_option_is_not_a_tool(self, response_factory):
        assert tools_in_use(response_factory(ai_tools_used=["없음"])) == 0
        assert tools_in_use(response_factory(ai_tools_used=["ChatGPT", "없음"])) == 1


class TestSegmentDistribution:

    def test_counts_every_response_once(self, response_factory):
        responses = [
            response_factory(experience_years="1~3년"),
            response_factory(experience_years="1~3년"),
            response_factory(experience_years="4~9년", ai_tools_used=["ChatGPT"]),
            response_factory(experience_years="10~19년", subject="사회", ai_tools_used=[]),
        ]
        counts = segment_distribution(responses)

        assert list(counts) == [
            SegmentId.AI_LEADING,
            SegmentId.AI_CAUTIOUS,
            SegmentId.AI_INTERESTED,
            SegmentId.AI_EXPLORING,
            SegmentId.UNSEGMENTED,
        ]
        assert counts[SegmentId.AI_EXPLORING] == 2
        assert counts[SegmentId.AI_INTERESTED] == 1
        assert counts[SegmentId.UNSEGMENTED] == 1
        assert counts[SegmentId.AI_LEADING] == 0
        assert sum(counts.values()) == len(responses)

    def test_empty(self):
        assert set(segment_distribution([]).values()) == {0}


@pytest.mark.parametrize("segment", [s for s in SegmentId if s is not SegmentId.UNSEGMENTED])
def test_every_named_segment_has_a_profile(segment):
    assert SEGMENT_PROFILES[segment].segment == segment
    assert len(SEGMENT_PROFILES[segment].traits) == 3


def test_insight_page_copy():
    assert [h.label for h in INSIGHT_HIGHLIGHTS] == ["주요 발견", "교과목 격차", "타겟 그룹"]
    assert [p.title for p in POLICY_RECOMMENDATIONS] == ["🎯 맞춤형 연수 설계", "🔧 지원 방안"]
    assert all(len(p.items) == 4 for p in POLICY_RECOMMENDATIONS)
