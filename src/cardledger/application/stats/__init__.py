# Application Stats Package
from .calculator import StatisticsCalculator
from .service import StatisticsService

__all__ = ["StatisticsCalculator", "StatisticsService"]
