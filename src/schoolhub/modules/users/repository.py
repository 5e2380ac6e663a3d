"""
User Repository

Database operations for user accounts, including identifier lookup and the
user-side halves of the Subject<->User reference sets.
"""

import logging
import secrets
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import func, literal, or_, select, update
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.shared import is_valid_id
from schoolhub.modules.users.models import (
    ROLE_MODELS,
    Admin,
    Student,
    Teacher,
    User,
    UserRole,
    UserStatus,
)

logger = logging.getLogger(__name__)


def generate_user_code() -> str:
    """Generate a human-facing account number such as ``2026-482913``."""
    return f"{datetime.now(UTC).year}-{100000 + secrets.randbelow(900000)}"


def _uuid(value: str) -> object:
    # Typed bind so array_append/array_remove resolve against uuid[]
    return literal(str(value), UUID(as_uuid=False))


def _with_subject(column, subject_id: str):
    """SQL for adding ``subject_id`` to a uuid[] column without duplicating it."""
    return func.array_append(func.array_remove(column, _uuid(subject_id)), _uuid(subject_id))


def _without_subject(column, subject_id: str):
    return func.array_remove(column, _uuid(subject_id))


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        role: UserRole,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        user_code: str | None = None,
        status: UserStatus = UserStatus.PENDING,
        **profile,
    ) -> User:
        """
        Create a new user of the given role.

        Returns:
            The created Admin, Teacher, or Student instance
        """
        model = ROLE_MODELS[role]
        user = model(
            user_code=user_code or generate_user_code(),
            username=username,
            email=email.lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            status=status,
            **profile,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.username} ({role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        """Get a user by id. Returns None for malformed ids."""
        if not is_valid_id(user_id):
            return None
        result = await db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Get a user by email address (case-insensitive)."""
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_first_admin(db: AsyncSession) -> Admin | None:
        """Get the oldest Admin account, if any."""
        result = await db.execute(select(Admin).order_by(Admin.created_at).limit(1))
        return result.scalars().first()

    @staticmethod
    async def find_by_identifier(
        db: AsyncSession,
        identifier: str,
        role: UserRole,
        require_active: bool = True,
    ) -> User | None:
        """
        Resolve an id, username, or email to a user of ``role``.

        When ``identifier`` looks like an id it is tried first; if that finds
        nothing (unknown id, wrong role, or not active) the lookup falls
        through to username/email matching under the same filters.

        Args:
            db: Database session
            identifier: User id, username, or email
            role: Role the user must have
            require_active: Only match users with status ``active``

        Returns:
            The matching user, or None
        """
        conditions = [User.role == role]
        if require_active:
            conditions.append(User.status == UserStatus.ACTIVE)

        if is_valid_id(identifier):
            result = await db.execute(select(User).where(User.id == str(identifier), *conditions))
            user = result.scalar_one_or_none()
            if user is not None:
                return user

        result = await db.execute(
            select(User)
            .where(
                or_(User.username == identifier, User.email == identifier.lower()),
                *conditions,
            )
            .limit(1)
        )
        return result.scalars().first()

    # ============================================
    # Reference set updates
    # ============================================
    # Each returns the number of user rows changed so callers can detect a
    # missing counterpart (e.g. a teacher id that no longer exists).

    @staticmethod
    async def add_assigned_subject(db: AsyncSession, teacher_id: str, subject_id: str) -> int:
        """Add a subject to a teacher's assigned set."""
        result = await db.execute(
            update(Teacher)
            .where(Teacher.id == str(teacher_id), Teacher.role == UserRole.TEACHER)
            .values(assigned_subjects=_with_subject(Teacher.assigned_subjects, subject_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    async def remove_assigned_subject(db: AsyncSession, teacher_id: str, subject_id: str) -> int:
        """Remove a subject from a teacher's assigned set."""
        result = await db.execute(
            update(Teacher)
            .where(Teacher.id == str(teacher_id), Teacher.role == UserRole.TEACHER)
            .values(assigned_subjects=_without_subject(Teacher.assigned_subjects, subject_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    async def add_enrolled_subject(
        db: AsyncSession, student_ids: Sequence[str], subject_id: str
    ) -> int:
        """Add a subject to each student's enrolled set."""
        if not student_ids:
            return 0
        result = await db.execute(
            update(Student)
            .where(
                Student.id.in_([str(sid) for sid in student_ids]),
                Student.role == UserRole.STUDENT,
            )
            .values(enrolled_subjects=_with_subject(Student.enrolled_subjects, subject_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    async def remove_enrolled_subject(
        db: AsyncSession, student_ids: Sequence[str], subject_id: str
    ) -> int:
        """Remove a subject from each student's enrolled set."""
        if not student_ids:
            return 0
        result = await db.execute(
            update(Student)
            .where(
                Student.id.in_([str(sid) for sid in student_ids]),
                Student.role == UserRole.STUDENT,
            )
            .values(enrolled_subjects=_without_subject(Student.enrolled_subjects, subject_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
