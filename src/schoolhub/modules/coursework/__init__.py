"""
Coursework module - Activities and grades recorded against a subject.
"""

from schoolhub.modules.coursework.models import Activity, Grade, Quarter

__all__ = ["Activity", "Grade", "Quarter"]
