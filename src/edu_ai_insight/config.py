from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "EDU-AI Insight"
APP_VERSION = "0.1.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# ---------------------------------------------------------------------------
# Response store (Supabase / PostgREST)
#
# The survey table is reached through the PostgREST endpoint that Supabase
# exposes under <project url>/rest/v1/<table>. Only two calls are made:
#   - GET  ...?select=*&order=created_at.desc   (whole table, newest first)
#   - POST one row
# The anon key is sent both as 'apikey' and as a Bearer token.
# ---------------------------------------------------------------------------

SUPABASE_URL = os.getenv("SUPABASE_URL", "").strip().rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "").strip()

SURVEY_TABLE = os.getenv("SURVEY_TABLE", "survey_responses").strip() or "survey_responses"

STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "30"))

# 0 = a failed read is reported immediately (no retry).
STORE_MAX_RETRIES = int(os.getenv("STORE_MAX_RETRIES", "0"))

# ---------------------------------------------------------------------------
# Aggregation / export
# ---------------------------------------------------------------------------

TOP_TOOLS_LIMIT = 10
AVERAGE_DECIMAL_PLACES = 1
RECENT_RESPONSES_LIMIT = 10

EXPORT_FILENAME_PREFIX = "edu-ai-survey"
CSV_LIST_SEPARATOR = "; "
