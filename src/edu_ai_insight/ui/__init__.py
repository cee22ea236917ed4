"""Streamlit front end: survey form, admin dashboard and insights page."""
