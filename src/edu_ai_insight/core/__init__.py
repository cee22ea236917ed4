"""
Core data and analytics layer.

- survey_schema: SurveyResponse record, option catalogs, rating normalization, form validation
- response_store: PostgREST client for the survey_responses table
- aggregation: counts, averages, experience correlations, subject trends, tool ranking
- csv_export: CSV document for spreadsheet download
- segments: rule-based teacher segment classifier
- report_engine: per-page reports and survey submission used by the UI
"""
