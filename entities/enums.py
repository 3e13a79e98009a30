"""Status and type codes of guild scheduled events."""
from enum import Enum


class Status(Enum):
    """
    Lifecycle status reported by the API.

    SCHEDULED -> ACTIVE -> COMPLETED, SCHEDULED -> CANCELED and
    ACTIVE -> CANCELED. Transitions are not checked locally.
    """
    UNKNOWN = -1
    SCHEDULED = 1
    ACTIVE = 2
    COMPLETED = 3
    CANCELED = 4

    @property
    def key(self) -> int:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (Status.COMPLETED, Status.CANCELED)

    @classmethod
    def from_key(cls, key: int) -> 'Status':
        for status in cls:
            if status.key == key:
                return status
        return cls.UNKNOWN


class Type(Enum):
    """Where an event takes place, derived from its location fields."""
    UNKNOWN = -1
    STAGE_INSTANCE = 1
    VOICE = 2
    EXTERNAL = 3

    @property
    def key(self) -> int:
        return self.value

    @classmethod
    def from_key(cls, key: int) -> 'Type':
        for event_type in cls:
            if event_type.key == key:
                return event_type
        return cls.UNKNOWN
