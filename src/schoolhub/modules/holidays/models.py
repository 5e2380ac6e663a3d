"""
Holiday Models

A holiday is a fixed month/day observed every year. Rows are seeded once
and never modified automatically.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Index, SmallInteger, String
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class HolidayType(str, Enum):
    REGULAR = "regular"
    SPECIAL = "special"


class Holiday(BaseModel):
    __tablename__ = "holidays"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    month: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    day: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    type: Mapped[HolidayType] = mapped_column(
        ENUM(HolidayType, name="holiday_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_holidays_month"),
        CheckConstraint("day BETWEEN 1 AND 31", name="ck_holidays_day"),
        Index("ix_holidays_month_day", "month", "day"),
    )

    def __repr__(self) -> str:
        return f"<Holiday(name={self.name}, {self.month:02d}-{self.day:02d}, {self.type.value})>"
