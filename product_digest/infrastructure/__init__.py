"""Infrastructure layer: logging, scheduler, delivery channels"""

from .logging import setup_logging
from .scheduler import SchedulerManager

__all__ = ["setup_logging", "SchedulerManager"]
