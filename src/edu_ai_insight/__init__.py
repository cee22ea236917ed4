"""
EDU-AI Insight: teacher AI-usage survey intake and analytics dashboard.
"""

__version__ = "0.1.0"
