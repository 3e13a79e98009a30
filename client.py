"""Client wiring for guild scheduled events."""
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from entities.builder import ScheduledEventBuilder
from entities.scheduled_event import ScheduledEvent
from entities.updates import ScheduledEventUpdate
from rest import routes
from rest.action import RestAction
from rest.executor import RestActionExecutor
from storage.cache import EntityCache

logger = logging.getLogger(__name__)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class ClientConfig:
    """Settings read from the environment."""
    token: str
    api_base_url: str
    log_level: str
    timeout_seconds: int
    max_retries: int

    @classmethod
    def from_env(cls) -> 'ClientConfig':
        return cls(
            token=os.environ.get('DISCORD_TOKEN', ''),
            api_base_url=os.environ.get('API_BASE_URL', RestActionExecutor.BASE_URL),
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', '30')),
            max_retries=int(os.environ.get('MAX_RETRIES', '3'))
        )


class Client:
    """
    Owns the executor, entity cache and builder.

    Logging is left to the application; call setup_logging() from the
    entry point to get JSON output.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig.from_env()
        self.executor = RestActionExecutor(
            token=self.config.token,
            base_url=self.config.api_base_url,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries
        )
        self.cache = EntityCache()
        self.builder = ScheduledEventBuilder(self.executor, self.cache)

        logger.info(
            "Client initialized",
            extra={
                'api_base_url': self.config.api_base_url
            }
        )

    def retrieve_scheduled_event(self, guild_id: int, event_id: int) -> RestAction:
        """Describe a fetch of one event; the result is cached on completion."""
        route = routes.GET_SCHEDULED_EVENT.compile(guild_id, event_id)
        return RestAction(
            self.executor,
            route,
            params={'with_user_count': 'true'},
            transform=self.builder.create_scheduled_event
        )

    def retrieve_scheduled_events(self, guild_id: int) -> RestAction:
        """Describe a fetch of every event in a guild."""
        route = routes.GET_SCHEDULED_EVENTS.compile(guild_id)
        return RestAction(
            self.executor,
            route,
            params={'with_user_count': 'true'},
            transform=self.builder.create_scheduled_events
        )

    def handle_scheduled_event_create(self, payload: Dict[str, Any]) -> ScheduledEvent:
        return self.builder.create_scheduled_event(payload)

    def handle_scheduled_event_update(
        self,
        payload: Dict[str, Any]
    ) -> List[ScheduledEventUpdate]:
        changes = self.builder.update_scheduled_event(payload)
        for change in changes:
            logger.info(
                f"Scheduled event {payload['id']} changed: {change.identifier}"
            )
        return changes

    def handle_scheduled_event_delete(
        self,
        payload: Dict[str, Any]
    ) -> Optional[ScheduledEvent]:
        return self.builder.remove_scheduled_event(payload)

    def close(self) -> None:
        self.executor.close()
