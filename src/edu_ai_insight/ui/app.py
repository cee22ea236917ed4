from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd
import streamlit as st

from edu_ai_insight.config import APP_NAME, APP_VERSION, LOG_LEVEL, RECENT_RESPONSES_LIMIT
from edu_ai_insight.core.csv_export import CSV_MIME_TYPE, export_csv_bytes, export_filename
from edu_ai_insight.core.report_engine import (
    ResponseStore,
    run_dashboard_report,
    run_insight_report,
    submit_survey,
)
from edu_ai_insight.core.response_store import ResponseStoreClient, StoreError
from edu_ai_insight.core.segments import (
    INSIGHT_HIGHLIGHTS,
    POLICY_RECOMMENDATIONS,
    POLICY_RECOMMENDATIONS_TITLE,
    SEGMENT_PROFILES,
    SegmentId,
)
from edu_ai_insight.core.survey_schema import (
    AI_TOOL_OPTIONS,
    AI_USAGE_PURPOSE_OPTIONS,
    EMPLOYMENT_TYPES,
    EXPERIENCE_BRACKETS,
    INTERESTED_AI_AREA_OPTIONS,
    LOCATIONS,
    MAX_RATING,
    MIN_RATING,
    PROBLEM_OPTIONS,
    SUBJECTS,
    SURVEY_NOTICES,
    SURVEY_PURPOSES,
    SURVEY_TAGLINE,
)

PAGE_HOME = "소개"
PAGE_SURVEY = "설문 참여"
PAGE_DASHBOARD = "관리자 대시보드"
PAGE_INSIGHTS = "심화 분석"

PLACEHOLDER = "선택해주세요"


def _build_store() -> Optional[ResponseStore]:
    try:
        return ResponseStoreClient.from_config()
    except StoreError as exc:
        st.error(f"Response store is not configured: {exc}")
        return None


def _counts_frame(counts: Dict[str, int], label: str) -> pd.DataFrame:
    return pd.DataFrame({label: list(counts.keys()), "count": list(counts.values())}).set_index(label)


# ---------------------------------------------------------------------------
# Landing page
# ---------------------------------------------------------------------------

def _render_home() -> None:
    st.subheader(SURVEY_TAGLINE)

    columns = st.columns(2)
    for i, (title, description) in enumerate(SURVEY_PURPOSES):
        with columns[i % 2]:
            st.markdown(f"**{title}**")
            st.caption(description)

    st.info(f"왼쪽 메뉴에서 '{PAGE_SURVEY}'를 선택해 설문을 시작하세요.")
    for notice in SURVEY_NOTICES:
        st.write(notice)


# ---------------------------------------------------------------------------
# Survey form
# ---------------------------------------------------------------------------

def _render_survey(store: ResponseStore) -> None:
    st.subheader("교사 대상 AI 활용 설문조사")

    if st.session_state.get("survey_completed"):
        st.success("설문 완료! 소중한 의견을 주셔서 감사합니다.")
        if st.button("새 응답 작성"):
            st.session_state["survey_completed"] = False
            st.rerun()
        return

    with st.form("survey_form"):
        st.markdown("#### 1. 교사 정보")
        subject = st.selectbox("담당 교과목 *", [PLACEHOLDER] + SUBJECTS)
        location = st.selectbox("근무지 *", [PLACEHOLDER] + LOCATIONS)
        school_name = st.text_input("학교명 *")
        employment_type = st.selectbox("근무형태 *", [PLACEHOLDER] + EMPLOYMENT_TYPES)
        experience_years = st.selectbox("교직경력 *", [PLACEHOLDER] + EXPERIENCE_BRACKETS)

        st.markdown("#### 2. 교육현장 고민")
        main_concern = st.text_area("현재 가장 큰 고민은 무엇인가요? *")
        problems = st.multiselect("겪고 있는 문제 (복수 선택) *", PROBLEM_OPTIONS)

        st.markdown("#### 3. AI 활용 현황")
        ai_tools_used = st.multiselect("사용해 본 AI 도구", AI_TOOL_OPTIONS)
        ai_usage_purpose = st.multiselect("AI 활용 용도", AI_USAGE_PURPOSE_OPTIONS)

        st.markdown("#### 4. 관심 분야")
        interested_ai_areas = st.multiselect("배우고 싶은 AI 분야 *", INTERESTED_AI_AREA_OPTIONS)

        st.markdown("#### 5. AI 인식")
        ai_positive_rating = st.radio(
            "AI가 교육현장에 긍정적 영향을 미친다고 생각하시나요? *",
            options=list(range(MIN_RATING, MAX_RATING + 1)),
            index=2,
            horizontal=True,
        )
        support_needed = st.text_area("필요한 지원은 무엇인가요? *")

        submitted = st.form_submit_button("제출하기")

    if not submitted:
        return

    form = {
        "subject": "" if subject == PLACEHOLDER else subject,
        "location": "" if location == PLACEHOLDER else location,
        "school_name": school_name,
        "employment_type": "" if employment_type == PLACEHOLDER else employment_type,
        "experience_years": "" if experience_years == PLACEHOLDER else experience_years,
        "main_concern": main_concern,
        "problems": problems,
        "ai_tools_used": ai_tools_used,
        "ai_usage_purpose": ai_usage_purpose,
        "interested_ai_areas": interested_ai_areas,
        "ai_positive_rating": ai_positive_rating,
        "support_needed": support_needed,
    }

    with st.spinner("제출 중..."):
        outcome = submit_survey(store, form)

    if outcome.ok:
        st.session_state["survey_completed"] = True
        st.rerun()

    st.error(outcome.message)
    for name, message in outcome.field_errors.items():
        st.warning(f"{name}: {message}")


# ---------------------------------------------------------------------------
# Admin dashboard
# ---------------------------------------------------------------------------

def _render_dashboard(store: ResponseStore) -> None:
    st.subheader("EDU-AI Insight 관리자 대시보드")

    with st.spinner("데이터를 불러오는 중..."):
        report = run_dashboard_report(store)

    if report.error:
        st.error(report.error)

    stats = report.stats
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("총 응답수", stats.total)
    col2.metric("교과목 수", len(stats.by_subject))
    col3.metric("AI 평점 평균", stats.avg_rating_display)
    with col4:
        st.download_button(
            "CSV 다운로드",
            data=export_csv_bytes(report.responses),
            file_name=export_filename(),
            mime=CSV_MIME_TYPE,
        )

    left, right = st.columns(2)
    with left:
        st.markdown("**교과목별 응답 현황**")
        if stats.by_subject:
            st.bar_chart(_counts_frame(stats.by_subject, "subject"))
    with right:
        st.markdown("**지역별 응답 현황**")
        if stats.by_location:
            st.bar_chart(_counts_frame(stats.by_location, "location"))

    st.markdown("**AI 도구 사용 현황 (상위 10개)**")
    if report.top_tools:
        st.bar_chart(_counts_frame(dict(report.top_tools), "tool"))

    st.markdown("**최근 응답 목록**")
    recent = [
        {
            "제출일시": r.created_at or "-",
            "교과목": r.subject,
            "근무지": r.location,
            "교직경력": r.experience_years,
            "AI 평점": r.ai_positive_rating,
        }
        for r in report.responses[:RECENT_RESPONSES_LIMIT]
    ]
    st.dataframe(pd.DataFrame(recent), use_container_width=True)


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

def _render_insights(store: ResponseStore) -> None:
    st.subheader("심화 분석 리포트")

    with st.spinner("데이터를 불러오는 중..."):
        report = run_insight_report(store)

    if report.error:
        st.error(report.error)

    for col, highlight in zip(st.columns(len(INSIGHT_HIGHLIGHTS)), INSIGHT_HIGHLIGHTS):
        col.metric(highlight.label, highlight.headline)

    left, right = st.columns(2)
    with left:
        st.markdown("**교직경력별 AI 인식도**")
        corr = pd.DataFrame(
            [
                {
                    "experience": c.experience,
                    "avg_ai_tools": float(c.avg_ai_tools),
                    "avg_rating": float(c.avg_rating),
                    "count": c.count,
                }
                for c in report.correlations
            ]
        )
        if not corr.empty:
            st.scatter_chart(corr, x="avg_ai_tools", y="avg_rating")
            st.dataframe(corr, use_container_width=True)
    with right:
        st.markdown("**교과목별 AI 활용 패턴**")
        trends = pd.DataFrame(
            [
                {
                    "subject": t.subject,
                    "avg_rating": float(t.avg_rating),
                    "problem_count": t.problem_count,
                    "count": t.count,
                }
                for t in report.trends
            ]
        )
        if not trends.empty:
            st.area_chart(trends.set_index("subject")[["avg_rating"]])
            st.dataframe(trends, use_container_width=True)

    st.markdown("**교사 세그먼트별 특성 분석**")
    columns = st.columns(len(SEGMENT_PROFILES))
    for col, (segment, profile) in zip(columns, SEGMENT_PROFILES.items()):
        with col:
            st.markdown(f"**{profile.title}**")
            st.caption(profile.audience)
            for trait in profile.traits:
                st.write(f"• {trait}")
            st.metric("해당 응답수", report.segments.get(segment, 0))
    st.caption(f"미분류 응답: {report.segments.get(SegmentId.UNSEGMENTED, 0)}")

    st.markdown(f"**{POLICY_RECOMMENDATIONS_TITLE}**")
    for col, recommendation in zip(st.columns(len(POLICY_RECOMMENDATIONS)), POLICY_RECOMMENDATIONS):
        with col:
            st.markdown(f"**{recommendation.title}**")
            for item in recommendation.items:
                st.write(f"• {item}")


def run_app() -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    st.set_page_config(page_title=APP_NAME, page_icon="📊", layout="wide")
    st.title(APP_NAME)
    st.caption(f"Version {APP_VERSION}")

    page = st.sidebar.radio("Page", [PAGE_HOME, PAGE_SURVEY, PAGE_DASHBOARD, PAGE_INSIGHTS])

    if page == PAGE_HOME:
        _render_home()
        return

    store = _build_store()
    if store is None:
        return

    if page == PAGE_SURVEY:
        _render_survey(store)
    elif page == PAGE_DASHBOARD:
        _render_dashboard(store)
    else:
        _render_insights(store)
