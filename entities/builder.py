"""Builds scheduled event entities from API payloads."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from entities import updates
from entities.enums import Status, Type
from entities.scheduled_event import ScheduledEvent
from entities.updates import ScheduledEventUpdate

logger = logging.getLogger(__name__)


class ScheduledEventBuilder:
    """
    Turns wire payloads into cached ScheduledEvent instances.

    One instance exists per event ID. Every payload overwrites all mutable
    fields of that instance (last write wins).
    """

    REQUIRED_FIELDS = ('id', 'guild_id', 'name', 'scheduled_start_time')

    def __init__(self, executor, cache):
        self.executor = executor
        self.cache = cache

    def create_scheduled_events(
        self,
        payloads: List[Dict[str, Any]]
    ) -> List[ScheduledEvent]:
        """
        Build events from a list of payloads, skipping invalid ones.

        Args:
            payloads: Scheduled event objects as returned by the API

        Returns:
            List of cached ScheduledEvent objects
        """
        events = []

        for payload in payloads:
            try:
                events.append(self.create_scheduled_event(payload))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    f"Failed to build scheduled event '{payload.get('id')}': {e}"
                )
                continue

        logger.info(
            f"Built {len(events)} scheduled events out of "
            f"{len(payloads)} payloads"
        )
        return events

    def create_scheduled_event(self, payload: Dict[str, Any]) -> ScheduledEvent:
        """
        Create or refresh the cached event described by payload.

        Raises:
            KeyError: If a required field is missing
            ValueError: If an ID or timestamp cannot be parsed
        """
        self._validate_required_fields(payload)
        event_id = int(payload['id'])
        guild_id = int(payload['guild_id'])

        event = self.cache.get_scheduled_event(event_id)
        if event is not None:
            self._apply(event, payload)
            return event

        event = ScheduledEvent(event_id, guild_id, self.executor, self.cache)
        self._apply(event, payload)
        self.cache.put_scheduled_event(event)
        logger.debug(f"Cached new scheduled event {event_id}")
        return event

    def update_scheduled_event(
        self,
        payload: Dict[str, Any]
    ) -> List[ScheduledEventUpdate]:
        """
        Apply payload to a cached event and report which fields changed.

        Events not yet cached are created and produce no updates.
        """
        self._validate_required_fields(payload)
        event = self.cache.get_scheduled_event(int(payload['id']))
        if event is None:
            logger.info(
                f"Received update for uncached scheduled event {payload['id']}"
            )
            self.create_scheduled_event(payload)
            return []

        before = {
            updates.NAME: event.name,
            updates.DESCRIPTION: event.description,
            updates.IMAGE: event.image,
            updates.START_TIME: event.start_time,
            updates.END_TIME: event.end_time,
            updates.STATUS: event.status,
            updates.LOCATION: event.location,
        }
        self._apply(event, payload)
        after = {
            updates.NAME: event.name,
            updates.DESCRIPTION: event.description,
            updates.IMAGE: event.image,
            updates.START_TIME: event.start_time,
            updates.END_TIME: event.end_time,
            updates.STATUS: event.status,
            updates.LOCATION: event.location,
        }

        return [
            ScheduledEventUpdate(
                identifier=identifier,
                event=event,
                old_value=old_value,
                new_value=after[identifier]
            )
            for identifier, old_value in before.items()
            if old_value != after[identifier]
        ]

    def remove_scheduled_event(
        self,
        payload: Dict[str, Any]
    ) -> Optional[ScheduledEvent]:
        """Evict the event named by payload from the cache."""
        return self.cache.remove_scheduled_event(int(payload['id']))

    def _apply(self, event: ScheduledEvent, payload: Dict[str, Any]) -> None:
        # parse first so a malformed payload leaves the event untouched
        start_time = self._parse_time(payload['scheduled_start_time'])
        end_time = self._parse_time(payload.get('scheduled_end_time'))
        creator_id = payload.get('creator_id')
        creator_id = int(creator_id) if creator_id else 0

        event.name = payload['name']
        event.description = payload.get('description')
        event.image = payload.get('image')
        event.start_time = start_time
        event.end_time = end_time
        event.status = Status.from_key(payload.get('status', Status.UNKNOWN.key))
        event.interested_user_count = payload.get('user_count', -1)

        event.creator_id_raw = creator_id
        creator = payload.get('creator')
        if creator:
            event.creator = self.cache.store_user(creator)
        elif event.creator_id_raw:
            event.creator = self.cache.get_user(event.creator_id_raw)
        else:
            event.creator = None

        self._apply_location(event, payload)

    def _apply_location(self, event: ScheduledEvent, payload: Dict[str, Any]) -> None:
        """Set exactly one location field and clear the others."""
        event.stage_channel = None
        event.voice_channel = None
        event.external_location = None

        channel_id = payload.get('channel_id')
        if channel_id:
            channel_id = int(channel_id)
            entity_type = payload.get('entity_type')
            if entity_type == Type.STAGE_INSTANCE.key:
                event.stage_channel = self.cache.get_stage_channel(channel_id)
            elif entity_type == Type.VOICE.key:
                event.voice_channel = self.cache.get_voice_channel(channel_id)
            else:
                # payloads without entity_type: resolve by the channel's kind
                event.stage_channel = self.cache.get_stage_channel(channel_id)
                if event.stage_channel is None:
                    event.voice_channel = self.cache.get_voice_channel(channel_id)

            if event.channel is None:
                logger.warning(
                    f"Channel {channel_id} of scheduled event {event.id} "
                    f"is not cached"
                )
            return

        metadata = payload.get('entity_metadata') or {}
        event.external_location = metadata.get('location')

    def _validate_required_fields(self, payload: Dict[str, Any]) -> None:
        for field_name in self.REQUIRED_FIELDS:
            if payload.get(field_name) is None:
                raise KeyError(f"missing required field: {field_name}")

    @staticmethod
    def _parse_time(value: Optional[str]) -> Optional[datetime]:
        """
        Parse an ISO 8601 timestamp.

        Args:
            value: Timestamp with an offset or ``Z`` suffix

        Returns:
            Timezone-aware datetime (UTC if no offset was given), or None
        """
        if not value:
            return None
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
