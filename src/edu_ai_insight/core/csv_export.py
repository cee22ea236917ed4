from __future__ import annotations

import csv
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd

from edu_ai_insight.config import CSV_LIST_SEPARATOR, EXPORT_FILENAME_PREFIX
from edu_ai_insight.core.survey_schema import SurveyResponse

UTF8_BOM = "\ufeff"
CSV_MIME_TYPE = "text/csv;charset=utf-8"

EXPORT_HEADERS = [
    "제출일시",
    "교과목",
    "근무지",
    "학교명",
    "근무형태",
    "교직경력",
    "주요고민",
    "교육문제",
    "AI도구",
    "AI용도",
    "관심분야",
    "AI평점",
    "필요지원",
]


def _join(values: Optional[Sequence[str]]) -> str:
    if not values:
        return ""
    return CSV_LIST_SEPARATOR.join(values)


def _export_row(r: SurveyResponse) -> List[str]:
    return [
        "" if r.created_at is None else str(r.created_at),
        r.subject,
        r.location,
        r.school_name,
        r.employment_type,
        r.experience_years,
        r.main_concern,
        _join(r.problems),
        _join(r.ai_tools_used),
        _join(r.ai_usage_purpose),
        _join(r.interested_ai_areas),
        str(r.ai_positive_rating),
        r.support_needed,
    ]


def export_csv(responses: Sequence[SurveyResponse]) -> str:
    """
    Serialize responses to a spreadsheet-friendly CSV document.

    Every cell is quoted with embedded quotes doubled, rows are separated by
    '\\n' with no terminator after the last row, and the text starts with a
    UTF-8 byte-order mark.
    """
    table = pd.DataFrame([_export_row(r) for r in responses], columns=EXPORT_HEADERS, dtype=str)
    body = table.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    if body.endswith("\n"):
        body = body[:-1]
    return UTF8_BOM + body


def export_csv_bytes(responses: Sequence[SurveyResponse]) -> bytes:
    return export_csv(responses).encode("utf-8")


def export_filename(today: Optional[date] = None) -> str:
    """Download name stamped with the export date (UTC), not the data date."""
    if today is None:
        today = datetime.now(timezone.utc).date()
    return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.csv"
