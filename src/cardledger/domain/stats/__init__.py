# Domain Stats Package
from .models import BasicStats, DailyProgress, ExtendedStats, StreakDay, TagShare, WeeklyProgress

__all__ = [
    "BasicStats",
    "ExtendedStats",
    "TagShare",
    "DailyProgress",
    "WeeklyProgress",
    "StreakDay",
]
