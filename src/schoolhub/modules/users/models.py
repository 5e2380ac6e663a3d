"""
User Models

One ``users`` table with single-table inheritance on ``role``. The
role-specific reference sets only exist on their variant:

- Teacher.assigned_subjects: subjects the teacher is teacher-of-record for
- Student.enrolled_subjects: subjects the student is enrolled in
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class UserRole(str, Enum):
    """User roles in the system."""

    ADMIN = "Admin"
    TEACHER = "Teacher"
    STUDENT = "Student"


class UserStatus(str, Enum):
    """Account status. Only ACTIVE users can be enrolled or assigned."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"
    ARCHIVED = "archived"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(BaseModel):
    """
    Base account record.

    ``role`` is the polymorphic discriminator and is immutable once the row
    exists; loading a row yields an Admin, Teacher, or Student instance.
    """

    __tablename__ = "users"

    # Identity
    user_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Profile
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    sex: Mapped[str | None] = mapped_column(String(10), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(Text, nullable=True)

    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
    )
    status: Mapped[UserStatus] = mapped_column(
        ENUM(UserStatus, name="user_status", values_callable=_enum_values),
        nullable=False,
        default=UserStatus.PENDING,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __mapper_args__ = {"polymorphic_on": "role"}

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, username={self.username})>"

    @property
    def full_name(self) -> str:
        """Return user's full name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class Admin(User):
    """Administrator account."""

    __mapper_args__ = {"polymorphic_identity": UserRole.ADMIN}


class Teacher(User):
    """Teacher account with the set of subjects they teach."""

    assigned_subjects: Mapped[list[str] | None] = mapped_column(
        ARRAY(UUID(as_uuid=False)),
        nullable=True,
        server_default=text("'{}'"),
        default=list,
    )

    __mapper_args__ = {"polymorphic_identity": UserRole.TEACHER}


class Student(User):
    """Student account with the set of subjects they are enrolled in."""

    enrolled_subjects: Mapped[list[str] | None] = mapped_column(
        ARRAY(UUID(as_uuid=False)),
        nullable=True,
        server_default=text("'{}'"),
        default=list,
    )

    __mapper_args__ = {"polymorphic_identity": UserRole.STUDENT}


ROLE_MODELS: dict[UserRole, type[User]] = {
    UserRole.ADMIN: Admin,
    UserRole.TEACHER: Teacher,
    UserRole.STUDENT: Student,
}
