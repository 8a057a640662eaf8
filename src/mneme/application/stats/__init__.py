# Application Stats Package
from .progress_calculator import ProgressCalculator, aggregate
from .service import ProgressService

__all__ = ["ProgressCalculator", "ProgressService", "aggregate"]
