"""Mutation builder for a scheduled event."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from entities.enums import Status, Type
from entities.models import StageChannel, VoiceChannel
from rest import routes
from rest.action import RestAction

logger = logging.getLogger(__name__)

class ScheduledEventManager:
    """
    Accumulates changes to one scheduled event and sends them as a PATCH.

    A manager knows only the guild and event IDs. It never reads the cached
    entity, so every manager starts empty and two managers share no state.
    Only fields set explicitly are sent.
    """

    MAX_NAME_LENGTH = 100
    MAX_DESCRIPTION_LENGTH = 1000

    def __init__(self, executor, guild_id: int, event_id: int):
        self.executor = executor
        self.guild_id = guild_id
        self.event_id = event_id
        self.changes: Dict[str, Any] = {}
        self.audit_reason: Optional[str] = None
        self._start_time: Optional[datetime] = None

    def reset(self) -> 'ScheduledEventManager':
        self.changes = {}
        self._start_time = None
        return self

    def reason(self, reason: Optional[str]) -> 'ScheduledEventManager':
        self.audit_reason = reason
        return self

    def set_name(self, name: str) -> 'ScheduledEventManager':
        if name is None or not name.strip():
            raise ValueError("Name may not be blank")
        if len(name) > self.MAX_NAME_LENGTH:
            raise ValueError(
                f"Name may not be longer than {self.MAX_NAME_LENGTH} characters"
            )
        self.changes['name'] = name
        return self

    def set_description(self, description: Optional[str]) -> 'ScheduledEventManager':
        if description is not None and len(description) > self.MAX_DESCRIPTION_LENGTH:
            raise ValueError(
                f"Description may not be longer than "
                f"{self.MAX_DESCRIPTION_LENGTH} characters"
            )
        self.changes['description'] = description
        return self

    def set_image(self, image: Optional[str]) -> 'ScheduledEventManager':
        """Set the cover image as a data URI, or None to remove it."""
        if image is not None and not image.startswith('data:image/'):
            raise ValueError("Image must be a data URI")
        self.changes['image'] = image
        return self

    def set_start_time(self, start_time: datetime) -> 'ScheduledEventManager':
        start_time = self._aware(start_time)
        end_time = self.changes.get('scheduled_end_time')
        if end_time is not None and datetime.fromisoformat(end_time) < start_time:
            raise ValueError("Start time may not be after the end time")
        self._start_time = start_time
        self.changes['scheduled_start_time'] = start_time.isoformat()
        return self

    def set_end_time(self, end_time: Optional[datetime]) -> 'ScheduledEventManager':
        if end_time is None:
            self.changes['scheduled_end_time'] = None
            return self
        end_time = self._aware(end_time)
        if self._start_time is not None and end_time < self._start_time:
            raise ValueError("End time may not be before the start time")
        self.changes['scheduled_end_time'] = end_time.isoformat()
        return self

    def set_status(self, status: Status) -> 'ScheduledEventManager':
        if not isinstance(status, Status):
            raise ValueError(f"Expected a Status, got {type(status).__name__}")
        if status is Status.UNKNOWN:
            raise ValueError("Cannot set status to UNKNOWN")
        self.changes['status'] = status.key
        return self

    def set_location(self, location: str) -> 'ScheduledEventManager':
        """Turn the event into an external event at the given location."""
        if location is None or not location.strip():
            raise ValueError("Location may not be blank")
        self.changes['entity_type'] = Type.EXTERNAL.key
        self.changes['channel_id'] = None
        self.changes['entity_metadata'] = {'location': location}
        return self

    def set_channel(
        self,
        channel: Union[StageChannel, VoiceChannel]
    ) -> 'ScheduledEventManager':
        """Move the event into a stage or voice channel."""
        if isinstance(channel, StageChannel):
            entity_type = Type.STAGE_INSTANCE.key
        elif isinstance(channel, VoiceChannel):
            entity_type = Type.VOICE.key
        else:
            raise ValueError("Channel must be a stage or voice channel")
        if channel.guild_id != self.guild_id:
            raise ValueError("Channel must belong to the event's guild")
        self.changes['entity_type'] = entity_type
        self.changes['channel_id'] = str(channel.id)
        self.changes['entity_metadata'] = None
        return self

    def complete_action(self) -> RestAction:
        """Describe the PATCH request carrying all accumulated changes."""
        route = routes.MODIFY_SCHEDULED_EVENT.compile(self.guild_id, self.event_id)
        logger.debug(
            f"Modifying scheduled event {self.event_id}: "
            f"{sorted(self.changes)}"
        )
        return RestAction(
            self.executor, route, body=dict(self.changes)
        ).reason(self.audit_reason)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
