"""
Users module - Accounts and identifier lookup.
"""

from schoolhub.modules.users.models import Admin, Student, Teacher, User, UserRole, UserStatus
from schoolhub.modules.users.repository import UserRepository

__all__ = ["Admin", "Student", "Teacher", "User", "UserRole", "UserStatus", "UserRepository"]
