"""Service modules"""
from .fee_service import FeeService
from .monitor import MonitorJobs, build_price_cache
from .portfolio import PortfolioService
from .position_service import PositionService
from .price_cache import PriceCache
from .scheduler import DailyTrigger, IntervalTrigger, TaskScheduler, TaskSpec

__all__ = [
    "DailyTrigger",
    "FeeService",
    "IntervalTrigger",
    "MonitorJobs",
    "PortfolioService",
    "PositionService",
    "PriceCache",
    "TaskScheduler",
    "TaskSpec",
    "build_price_cache",
]
