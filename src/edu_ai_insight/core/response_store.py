from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from edu_ai_insight.config import (
    STORE_MAX_RETRIES,
    STORE_TIMEOUT_SECONDS,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
    SURVEY_TABLE,
)
from edu_ai_insight.core.survey_schema import InvalidRecordError, SurveyResponse

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a read or write against the response store fails."""


def _build_retry_session(max_retries: int) -> requests.Session:
    """
    Build a requests Session for the PostgREST endpoint.

    Reads are only retried when max_retries > 0; inserts are never retried
    so a submission cannot be stored twice.
    """
    session = requests.Session()

    retry = Retry(
        total=max_retries,
        connect=max_retries,
        read=max_retries,
        status=max_retries,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


def _error_detail(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return (resp.text or "")[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("details") or data.get("hint") or data)
    return str(data)[:200]


class ResponseStoreClient:
    """
    Client for the survey_responses table.

    Construct one explicitly (or via from_config) and pass it to whatever
    needs store access; there is no shared module-level connection.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "survey_responses",
        timeout_seconds: int = 30,
        max_retries: int = 0,
        session: Optional[requests.Session] = None,
    ) -> None:
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url:
            raise StoreError("Missing store URL. Expected SUPABASE_URL to be set.")
        if not api_key:
            raise StoreError("Missing store API key. Expected SUPABASE_ANON_KEY to be set.")

        self.table = table
        self.timeout_seconds = int(timeout_seconds)
        self._endpoint = f"{base_url}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._session = session if session is not None else _build_retry_session(int(max_retries))

    @classmethod
    def from_config(cls, session: Optional[requests.Session] = None) -> "ResponseStoreClient":
        return cls(
            SUPABASE_URL,
            SUPABASE_ANON_KEY,
            table=SURVEY_TABLE,
            timeout_seconds=STORE_TIMEOUT_SECONDS,
            max_retries=STORE_MAX_RETRIES,
            session=session,
        )

    def fetch_all(self) -> List[SurveyResponse]:
        """
        Return every stored response, newest first.

        Rows with a malformed rating or list field are dropped with a
        warning so they cannot poison the aggregates.
        """
        params = {"select": "*", "order": "created_at.desc"}
        logger.info("Fetching all rows from %s", self.table)

        try:
            resp = self._session.get(
                self._endpoint, params=params, headers=self._headers, timeout=self.timeout_seconds
            )
        except requests.RequestException as exc:
            raise StoreError(f"HTTP error while reading {self.table}: {exc}") from exc

        if not resp.ok:
            raise StoreError(
                f"Reading {self.table} failed. Status={resp.status_code}. Detail={_error_detail(resp)}"
            )

        try:
            rows = resp.json()
        except ValueError as exc:
            preview = (resp.text or "")[:200]
            raise StoreError(f"Non-JSON response from store (status={resp.status_code}). Preview: {preview}") from exc

        if not isinstance(rows, list):
            raise StoreError(f"Unexpected store response type: {type(rows)}")

        responses: List[SurveyResponse] = []
        for row in rows:
            if not isinstance(row, dict):
                raise StoreError(f"Unexpected row type in store response: {type(row)}")
            try:
                responses.append(SurveyResponse.from_record(row))
            except InvalidRecordError as exc:
                logger.warning("Rejected row id=%s: %s", row.get("id"), exc)

        logger.info("Fetched %d rows (%d rejected)", len(responses), len(rows) - len(responses))
        return responses

    def insert(self, record: SurveyResponse) -> None:
        """Append one response. Raises StoreError if the store refuses it."""
        payload: List[Dict[str, Any]] = [record.to_record()]
        headers = {**self._headers, "Content-Type": "application/json", "Prefer": "return=minimal"}

        try:
            resp = self._session.post(
                self._endpoint, json=payload, headers=headers, timeout=self.timeout_seconds
            )
        except requests.RequestException as exc:
            raise StoreError(f"HTTP error while inserting into {self.table}: {exc}") from exc

        if not resp.ok:
            raise StoreError(
                f"Insert into {self.table} failed. Status={resp.status_code}. Detail={_error_detail(resp)}"
            )

        logger.info("Inserted one row into %s", self.table)
