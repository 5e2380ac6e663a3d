"""
Holidays Module

Fixed Philippine holiday calendar and the seeder that turns it into
"Class Suspended" calendar events.

Background Jobs (via APScheduler):
- holidays_annual_generation: January 1st 00:01 UTC, 3 years ahead
- holidays_monthly_check: 1st of every month 02:00 UTC, 2 years ahead
"""

from .jobs import initialize_holiday_system, register_holiday_jobs
from .models import Holiday, HolidayType
from .router import router

__all__ = [
    "Holiday",
    "HolidayType",
    "initialize_holiday_system",
    "register_holiday_jobs",
    "router",
]
