"""Scheduled event entity and the actions it exposes."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from entities.enums import Status, Type
from entities.exceptions import InsufficientPermissionError
from entities.manager import ScheduledEventManager
from entities.models import Guild, Permission, StageChannel, User, VoiceChannel
from rest import routes
from rest.action import RestAction
from rest.pagination import (
    ScheduledEventMembersPaginationAction,
    ScheduledEventUsersPaginationAction,
)

logger = logging.getLogger(__name__)

IMAGE_URL = "https://cdn.discordapp.com/guild-events/{}/{}.{}"
EVENT_URL = "https://discord.com/events/{}/{}"


def image_url(event_id: int, image_hash: Optional[str]) -> Optional[str]:
    """
    Build the CDN URL of an event cover image.

    Hashes prefixed with ``a_`` are animated and served as gif.
    """
    if image_hash is None:
        return None
    extension = 'gif' if image_hash.startswith('a_') else 'png'
    return IMAGE_URL.format(event_id, image_hash, extension)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ScheduledEvent:
    """
    A guild scheduled event as last reported by the API.

    Instances are created and updated by ScheduledEventBuilder only. Equality
    and hashing use the ID alone, so stale copies compare equal to the cached
    instance.
    """

    MAX_NAME_LENGTH = 100
    MAX_DESCRIPTION_LENGTH = 1000

    def __init__(self, event_id: int, guild_id: int, executor, cache):
        self._id = event_id
        self._guild_id = guild_id
        self._executor = executor
        self._cache = cache

        self.name: str = ''
        self.description: Optional[str] = None
        self.image: Optional[str] = None
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.status: Status = Status.UNKNOWN
        self.creator: Optional[User] = None
        self.creator_id_raw: int = 0
        self.interested_user_count: int = -1

        # At most one of these is set; see ``type`` for the tie-break order.
        self.stage_channel: Optional[StageChannel] = None
        self.voice_channel: Optional[VoiceChannel] = None
        self.external_location: Optional[str] = None

    @property
    def id(self) -> int:
        return self._id

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def guild(self) -> Optional[Guild]:
        return self._cache.get_guild(self._guild_id)

    @property
    def image_url(self) -> Optional[str]:
        return image_url(self._id, self.image)

    @property
    def url(self) -> str:
        return EVENT_URL.format(self._guild_id, self._id)

    @property
    def creator_id(self) -> Optional[int]:
        """ID of the creator, or None for events that predate creator tracking."""
        return self.creator_id_raw or None

    @property
    def type(self) -> Type:
        if self.stage_channel is not None:
            return Type.STAGE_INSTANCE
        if self.voice_channel is not None:
            return Type.VOICE
        if self.external_location is not None:
            return Type.EXTERNAL
        return Type.UNKNOWN

    @property
    def channel(self) -> Optional[Union[StageChannel, VoiceChannel]]:
        if self.stage_channel is not None:
            return self.stage_channel
        if self.voice_channel is not None:
            return self.voice_channel
        return None

    @property
    def location(self) -> Optional[str]:
        """Channel ID for channel events, free text for external ones."""
        if self.stage_channel is not None:
            return str(self.stage_channel.id)
        if self.voice_channel is not None:
            return str(self.voice_channel.id)
        return self.external_location

    def get_manager(self) -> ScheduledEventManager:
        return ScheduledEventManager(self._executor, self._guild_id, self._id)

    def delete(self) -> RestAction:
        """
        Describe deletion of this event.

        Returns:
            RestAction that removes the event from the cache on success

        Raises:
            InsufficientPermissionError: If MANAGE_EVENTS is missing from
                the local permission snapshot
        """
        guild = self.guild
        member = guild.self_member if guild else None
        if member is None or not member.has_permission(Permission.MANAGE_EVENTS):
            raise InsufficientPermissionError(
                self._guild_id, Permission.MANAGE_EVENTS
            )

        route = routes.DELETE_SCHEDULED_EVENT.compile(self._guild_id, self._id)
        return RestAction(self._executor, route, transform=self._on_deleted)

    def retrieve_interested_users(self) -> ScheduledEventUsersPaginationAction:
        return ScheduledEventUsersPaginationAction(
            self._executor, self._cache, self._guild_id, self._id
        )

    def retrieve_interested_members(self) -> ScheduledEventMembersPaginationAction:
        return ScheduledEventMembersPaginationAction(
            self._executor, self._cache, self._guild_id, self._id
        )

    def compare_to(self, other: 'ScheduledEvent') -> int:
        """
        Order by start time, then by ID.

        Raises:
            ValueError: If other is None or belongs to another guild
        """
        if other is None:
            raise ValueError("Scheduled event to compare with may not be None")
        if not isinstance(other, ScheduledEvent):
            raise ValueError(
                f"Cannot compare a scheduled event with {type(other).__name__}"
            )
        if self._guild_id != other._guild_id:
            raise ValueError(
                "Cannot compare two scheduled events belonging to separate guilds"
            )

        # naive start times are read as UTC
        start_time = _as_utc(self.start_time)
        other_start_time = _as_utc(other.start_time)
        if start_time != other_start_time:
            return -1 if start_time < other_start_time else 1
        if self._id != other._id:
            return -1 if self._id < other._id else 1
        return 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the API wire shape."""
        channel = self.channel
        event_type = self.type
        return {
            'id': str(self._id),
            'guild_id': str(self._guild_id),
            'name': self.name,
            'description': self.description,
            'image': self.image,
            'creator_id': str(self.creator_id) if self.creator_id else None,
            'scheduled_start_time': (
                self.start_time.isoformat() if self.start_time else None
            ),
            'scheduled_end_time': (
                self.end_time.isoformat() if self.end_time else None
            ),
            'status': self.status.key,
            'entity_type': (
                event_type.key if event_type is not Type.UNKNOWN else None
            ),
            'channel_id': str(channel.id) if channel else None,
            'entity_metadata': (
                {'location': self.external_location}
                if event_type is Type.EXTERNAL else None
            ),
            'user_count': self.interested_user_count,
        }

    def _on_deleted(self, _response) -> None:
        logger.info(f"Deleted scheduled event {self._id} in guild {self._guild_id}")
        self._cache.remove_scheduled_event(self._id)

    def __eq__(self, other) -> bool:
        if other is self:
            return True
        if not isinstance(other, ScheduledEvent):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __lt__(self, other) -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other) -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other) -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other) -> bool:
        return self.compare_to(other) >= 0

    def __repr__(self) -> str:
        return (
            f"<ScheduledEvent id={self._id} name={self.name!r} "
            f"guild_id={self._guild_id}>"
        )
