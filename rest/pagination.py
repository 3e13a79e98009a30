"""Pagination over users interested in a scheduled event."""
import logging
from typing import Any, Dict, Iterator, List

from rest import routes

logger = logging.getLogger(__name__)


class ScheduledEventUsersPaginationAction:
    """
    Iterates users interested in a scheduled event, ascending by user ID.

    Pages are requested with ``after`` set to the highest ID seen so far;
    iteration stops once a page comes back shorter than the page size.
    """

    MIN_LIMIT = 1
    MAX_LIMIT = 100
    WITH_MEMBER = False

    def __init__(self, executor, cache, guild_id: int, event_id: int):
        self.executor = executor
        self.cache = cache
        self.guild_id = guild_id
        self.event_id = event_id
        self.page_size = self.MAX_LIMIT
        self.last_key = 0

    def limit(self, limit: int) -> 'ScheduledEventUsersPaginationAction':
        """
        Set how many entries are requested per page.

        Raises:
            ValueError: If limit is outside 1-100
        """
        if not self.MIN_LIMIT <= limit <= self.MAX_LIMIT:
            raise ValueError(
                f"Limit must be between {self.MIN_LIMIT} and {self.MAX_LIMIT}, "
                f"got {limit}"
            )
        self.page_size = limit
        return self

    def skip_to(self, user_id: int) -> 'ScheduledEventUsersPaginationAction':
        """Start iteration after the given user ID."""
        self.last_key = user_id
        return self

    def take(self, amount: int) -> List[Any]:
        """Collect at most ``amount`` entries."""
        entries = []
        if amount <= 0:
            return entries
        for entry in self:
            entries.append(entry)
            if len(entries) >= amount:
                break
        return entries

    def __iter__(self) -> Iterator[Any]:
        after = self.last_key
        route = routes.GET_SCHEDULED_EVENT_USERS.compile(
            self.guild_id, self.event_id
        )

        while True:
            params = {
                'limit': self.page_size,
                'with_member': str(self.WITH_MEMBER).lower(),
                'after': after
            }
            page = self.executor.execute(route, params=params) or []
            page = sorted(page, key=lambda entry: int(entry['user']['id']))
            logger.debug(
                f"Fetched {len(page)} interested users for event "
                f"{self.event_id} after {after}"
            )

            for entry in page:
                after = int(entry['user']['id'])
                yield self._build(entry)

            if len(page) < self.page_size:
                break

    def _build(self, entry: Dict[str, Any]) -> Any:
        return self.cache.store_user(entry['user'])


class ScheduledEventMembersPaginationAction(ScheduledEventUsersPaginationAction):
    """Iterates interested users as guild members, ascending by user ID."""

    WITH_MEMBER = True

    def _build(self, entry: Dict[str, Any]) -> Any:
        member = entry.get('member')
        if member is None:
            # user left the guild but is still marked interested
            return None
        member = dict(member, user=entry['user'])
        return self.cache.store_member(self.guild_id, member)

    def __iter__(self) -> Iterator[Any]:
        for member in super().__iter__():
            if member is not None:
                yield member
