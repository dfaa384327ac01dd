"""Service layer"""

from .bot_commands import BotCommandHandler
from .digest_data import get_digest_data, to_date_key
from .digest_service import DigestService, get_digest_service, should_run_now
from .publisher import MultiChannelPublisher, PublishResult
from .publish_log import PublishLogRepository

__all__ = [
    "BotCommandHandler",
    "get_digest_data",
    "to_date_key",
    "DigestService",
    "get_digest_service",
    "should_run_now",
    "MultiChannelPublisher",
    "PublishResult",
    "PublishLogRepository",
]
