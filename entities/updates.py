"""Field change records produced when a cached scheduled event is updated."""
from dataclasses import dataclass
from typing import Any

NAME = "guild_scheduled_event_name"
DESCRIPTION = "guild_scheduled_event_description"
IMAGE = "guild_scheduled_event_image"
START_TIME = "guild_scheduled_event_start_time"
END_TIME = "guild_scheduled_event_end_time"
STATUS = "guild_scheduled_event_status"
LOCATION = "guild_scheduled_event_location"


@dataclass
class ScheduledEventUpdate:
    """One changed field; ``old_value`` is None if the field was unset."""
    identifier: str
    event: Any
    old_value: Any
    new_value: Any
