"""
Holiday Schemas
"""

from pydantic import BaseModel, ConfigDict, Field

from .models import HolidayType


class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    month: int
    day: int
    type: HolidayType
    description: str | None = None
    is_active: bool


class HolidayListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[HolidayResponse]


class GenerateHolidaysRequest(BaseModel):
    """Body for POST /holidays/generate. Omit ``year`` to cover the default span."""

    year: int | None = Field(None, ge=1970, le=2100)


class GenerateHolidaysResponse(BaseModel):
    success: bool = True
    message: str
    data: dict[int, int]
