"""In-memory entity cache for guilds, channels, users and scheduled events."""
import logging
from typing import Any, Dict, List, Optional

from entities.models import (
    Guild, Member, Permission, StageChannel, User, VoiceChannel
)

logger = logging.getLogger(__name__)


class EntityCache:
    """
    Lookup tables keyed by snowflake ID.

    Lookups of unknown IDs return None rather than raising. The cache does
    no locking; callers serialize writes.
    """

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.guilds: Dict[int, Guild] = {}
        self.stage_channels: Dict[int, StageChannel] = {}
        self.voice_channels: Dict[int, VoiceChannel] = {}
        self.scheduled_events: Dict[int, Any] = {}

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_guild(self, guild_id: int) -> Optional[Guild]:
        return self.guilds.get(guild_id)

    def get_stage_channel(self, channel_id: int) -> Optional[StageChannel]:
        return self.stage_channels.get(channel_id)

    def get_voice_channel(self, channel_id: int) -> Optional[VoiceChannel]:
        return self.voice_channels.get(channel_id)

    def get_scheduled_event(self, event_id: int):
        return self.scheduled_events.get(event_id)

    def get_scheduled_events(self, guild_id: int) -> List[Any]:
        """Return the cached events of one guild in their natural order."""
        return sorted(
            event for event in self.scheduled_events.values()
            if event.guild_id == guild_id
        )

    def add_guild(self, guild: Guild) -> Guild:
        self.guilds[guild.id] = guild
        return guild

    def add_stage_channel(self, channel: StageChannel) -> StageChannel:
        self.stage_channels[channel.id] = channel
        return channel

    def add_voice_channel(self, channel: VoiceChannel) -> VoiceChannel:
        self.voice_channels[channel.id] = channel
        return channel

    def put_scheduled_event(self, event) -> None:
        self.scheduled_events[event.id] = event

    def remove_scheduled_event(self, event_id: int):
        """Evict an event; returns the evicted instance or None."""
        event = self.scheduled_events.pop(event_id, None)
        if event is not None:
            logger.info(f"Removed scheduled event {event_id} from cache")
        return event

    def store_user(self, data: Dict[str, Any]) -> User:
        """
        Create or refresh a user from its wire representation.

        Args:
            data: User object as returned by the API

        Returns:
            The cached User instance
        """
        user_id = int(data['id'])
        user = self.users.get(user_id)
        if user is None:
            user = User(id=user_id, name=data.get('username', ''))
            self.users[user_id] = user
        user.name = data.get('username', user.name)
        user.global_name = data.get('global_name')
        user.avatar = data.get('avatar')
        user.bot = data.get('bot', False)
        return user

    def store_member(self, guild_id: int, data: Dict[str, Any]) -> Member:
        """
        Create or refresh a guild member from its wire representation.

        The member is attached to the guild when the guild is cached.
        """
        user = self.store_user(data['user'])
        guild = self.get_guild(guild_id)
        member = guild.members.get(user.id) if guild else None
        if member is None:
            member = Member(user=user, guild_id=guild_id)
            if guild is not None:
                guild.members[user.id] = member
        member.nickname = data.get('nick')
        if 'permissions' in data:
            member.permissions = Permission(int(data['permissions']))
        return member
