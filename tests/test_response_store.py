"""Tests for the PostgREST response store client."""
from unittest.mock import MagicMock

import pytest
import requests

from edu_ai_insight.core import response_store
from edu_ai_insight.core.report_engine import run_dashboard_report
from edu_ai_insight.core.response_store import ResponseStoreClient, StoreError


def _http_response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


ROW = {
    "id": "6f1c",
    "created_at": "2025-03-02T10:00:00+00:00",
    "subject": "수학",
    "location": "서울특별시",
    "school_name": "한빛중학교",
    "employment_type": "정교사",
    "experience_years": "4~9년",
    "main_concern": "수업자료를 준비할 시간이 부족합니다.",
    "problems": ["수업자료 제작 시간 부족"],
    "ai_tools_used": ["ChatGPT"],
    "ai_usage_purpose": [],
    "interested_ai_areas": ["AI 채팅봇 제작"],
    "ai_positive_rating": "4",
    "support_needed": "교과별 활용 가이드가 필요합니다.",
}


class TestConstruction:

    def test_requires_url(self):
        with pytest.raises(StoreError):
            ResponseStoreClient("", "key", session=MagicMock())

    def test_requires_key(self):
        with pytest.raises(StoreError):
            ResponseStoreClient("https://example.supabase.co", "", session=MagicMock())


class TestFetchAll:

    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.fixture
    def client(self, session):
        return ResponseStoreClient("https://example.supabase.co/", "anon-key", table="survey_responses", session=session)

    def test_requests_all_rows_newest_first(self, client, session):
        session.get.return_value = _http_response(payload=[ROW])

        responses = client.fetch_all()

        args, kwargs = session.get.call_args
        assert args[0] == "https://example.supabase.co/rest/v1/survey_responses"
        assert kwargs["params"] == {"select": "*", "order": "created_at.desc"}
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"
        assert len(responses) == 1
        assert responses[0].ai_positive_rating == 4
        assert responses[0].id == "6f1c"

    def test_rows_with_bad_rating_are_dropped(self, client, session):
        bad = {**ROW, "id": "bad", "ai_positive_rating": "매우 좋음"}
        session.get.return_value = _http_response(payload=[ROW, bad])

        responses = client.fetch_all()

        assert [r.id for r in responses] == ["6f1c"]

    def test_transport_error_raises_store_error(self, client, session):
        session.get.side_effect = requests.ConnectionError("no route")

        with pytest.raises(StoreError):
            client.fetch_all()

    def test_http_error_raises_store_error(self, client, session):
        session.get.return_value = _http_response(status_code=401, payload={"message": "Invalid API key"})

        with pytest.raises(StoreError, match="Invalid API key"):
            client.fetch_all()

    def test_non_json_raises_store_error(self, client, session):
        session.get.return_value = _http_response(payload=ValueError("bad json"), text="<html>")

        with pytest.raises(StoreError):
            client.fetch_all()

    def test_unexpected_shape_raises_store_error(self, client, session):
        session.get.return_value = _http_response(payload={"rows": []})

        with pytest.raises(StoreError):
            client.fetch_all()


class TestInsert:

    def test_posts_one_row_without_store_fields(self, response_factory):
        session = MagicMock()
        session.post.return_value = _http_response(status_code=201)
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", session=session)

        client.insert(response_factory(id="x", created_at="2025-01-01", ai_positive_rating="5"))

        args, kwargs = session.post.call_args
        assert args[0] == "https://example.supabase.co/rest/v1/survey_responses"
        payload = kwargs["json"]
        assert len(payload) == 1
        assert "id" not in payload[0]
        assert payload[0]["ai_positive_rating"] == 5
        assert kwargs["headers"]["Prefer"] == "return=minimal"

    def test_constraint_violation_raises_store_error(self, response_factory):
        session = MagicMock()
        session.post.return_value = _http_response(status_code=400, payload={"message": "violates check constraint"})
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", session=session)

        with pytest.raises(StoreError, match="check constraint"):
            client.insert(response_factory())

    def test_connectivity_failure_raises_store_error(self, response_factory):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("timed out")
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", session=session)

        with pytest.raises(StoreError):
            client.insert(response_factory())


class TestMalformedRows:

    @pytest.mark.parametrize("field_name", ["problems", "ai_tools_used", "interested_ai_areas"])
    def test_row_with_non_list_field_is_dropped(self, field_name):
        session = MagicMock()
        session.get.return_value = _http_response(payload=[ROW, {**ROW, "id": "bad", field_name: 3}])
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", session=session)

        assert [r.id for r in client.fetch_all()] == ["6f1c"]

    def test_dashboard_survives_malformed_row(self):
        session = MagicMock()
        session.get.return_value = _http_response(
            payload=[{"subject": "수학", "ai_positive_rating": 4, "problems": 3}, ROW]
        )
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", session=session)

        report = run_dashboard_report(client)

        assert report.error is None
        assert report.stats.total == 1
        assert report.stats.by_subject == {"수학": 1}


class TestSessionConfiguration:

    def test_default_session_never_retries(self):
        client = ResponseStoreClient("https://example.supabase.co", "anon-key")

        retry = client._session.get_adapter("https://example.supabase.co").max_retries
        assert retry.total == 0
        assert retry.allowed_methods == frozenset({"GET"})
        assert not retry.is_retry("POST", 503)

    def test_configured_retries_apply_to_reads_only(self):
        client = ResponseStoreClient("https://example.supabase.co", "anon-key", max_retries=2)

        retry = client._session.get_adapter("https://example.supabase.co").max_retries
        assert retry.total == 2
        assert retry.is_retry("GET", 503)
        assert not retry.is_retry("POST", 503)

    def test_from_config_uses_settings(self, monkeypatch):
        monkeypatch.setattr(response_store, "SUPABASE_URL", "https://pilot.supabase.co")
        monkeypatch.setattr(response_store, "SUPABASE_ANON_KEY", "pilot-key")
        monkeypatch.setattr(response_store, "SURVEY_TABLE", "pilot_responses")
        monkeypatch.setattr(response_store, "STORE_TIMEOUT_SECONDS", 12)
        session = MagicMock()
        session.get.return_value = _http_response(payload=[])

        client = response_store.ResponseStoreClient.from_config(session=session)
        client.fetch_all()

        args, kwargs = session.get.call_args
        assert client.table == "pilot_responses"
        assert args[0] == "https://pilot.supabase.co/rest/v1/pilot_responses"
        assert kwargs["timeout"] == 12
        assert kwargs["headers"]["apikey"] == "pilot-key"

    def test_from_config_without_credentials_raises(self, monkeypatch):
        monkeypatch.setattr(response_store, "SUPABASE_URL", "")

        with pytest.raises(StoreError):
            response_store.ResponseStoreClient.from_config(session=MagicMock())
