"""
Events module - School calendar events, including generated holidays.
"""

from .models import Event, EventPriority, EventType, TargetAudience
from .router import router

__all__ = ["Event", "EventPriority", "EventType", "TargetAudience", "router"]
