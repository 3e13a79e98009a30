"""Data models for guild entities referenced by scheduled events."""
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Optional


class Permission(IntFlag):
    """Guild permission bits relevant to scheduled events."""
    ADMINISTRATOR = 1 << 3
    VIEW_CHANNEL = 1 << 10
    CONNECT = 1 << 20
    MANAGE_EVENTS = 1 << 33


@dataclass
class User:
    """User known to the entity cache."""
    id: int
    name: str
    global_name: Optional[str] = None
    avatar: Optional[str] = None
    bot: bool = False


@dataclass
class Member:
    """Guild member with a snapshot of its computed permissions."""
    user: User
    guild_id: int
    nickname: Optional[str] = None
    permissions: Permission = Permission(0)

    @property
    def id(self) -> int:
        return self.user.id

    def has_permission(self, *permissions: Permission) -> bool:
        """
        Check the local permission snapshot.

        Administrator implies every other permission.
        """
        if self.permissions & Permission.ADMINISTRATOR:
            return True
        return all(self.permissions & perm == perm for perm in permissions)


@dataclass
class StageChannel:
    id: int
    guild_id: int
    name: str


@dataclass
class VoiceChannel:
    id: int
    guild_id: int
    name: str


@dataclass
class Guild:
    """Guild container; ``self_member`` is the connected account's membership."""
    id: int
    name: str
    self_member: Optional[Member] = None
    members: Dict[int, Member] = field(default_factory=dict)
