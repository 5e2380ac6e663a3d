"""
Subjects Module

Subject lifecycle, teacher assignment and student enrollment:
1. Create / update / archive / restore / permanently delete subjects
2. Assign and unassign the teacher of record (max 10 active subjects each)
3. Enroll students singly or in bulk (max 30 per subject)

Both ends of every Subject <-> User relationship are kept in step by
``relations`` inside a single transaction per request.
"""

from .models import MAX_STUDENTS_PER_SUBJECT, MAX_SUBJECTS_PER_TEACHER, Subject
from .router import router

__all__ = ["MAX_STUDENTS_PER_SUBJECT", "MAX_SUBJECTS_PER_TEACHER", "Subject", "router"]
