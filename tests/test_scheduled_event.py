"""Unit tests for the ScheduledEvent entity."""
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from entities.exceptions import InsufficientPermissionError
from entities.manager import ScheduledEventManager
from entities.models import (
    Guild, Member, Permission, StageChannel, User, VoiceChannel
)
from entities.scheduled_event import ScheduledEvent, Status, Type, image_url
from rest.action import RestAction
from rest.pagination import (
    ScheduledEventMembersPaginationAction,
    ScheduledEventUsersPaginationAction,
)
from storage.cache import EntityCache

GUILD_ID = 81384788765712384
OTHER_GUILD_ID = 41771983423143937
T1 = datetime(2024, 1, 15, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def cache():
    """Create a cache holding one guild where the bot may manage events."""
    cache = EntityCache()
    bot = User(id=1, name='bot', bot=True)
    cache.add_guild(Guild(
        id=GUILD_ID,
        name='Test Guild',
        self_member=Member(
            user=bot, guild_id=GUILD_ID, permissions=Permission.MANAGE_EVENTS
        )
    ))
    cache.add_guild(Guild(id=OTHER_GUILD_ID, name='Other Guild'))
    return cache


@pytest.fixture
def executor():
    return Mock()


def make_event(cache, executor, event_id=100, guild_id=GUILD_ID, start_time=T1):
    event = ScheduledEvent(event_id, guild_id, executor, cache)
    event.name = f'Event {event_id}'
    event.start_time = start_time
    return event


class TestImageUrl:
    """Test cases for cover image URL derivation."""

    def test_static_hash_uses_png(self):
        assert image_url(100, 'abc123') == (
            'https://cdn.discordapp.com/guild-events/100/abc123.png'
        )

    def test_animated_hash_uses_gif(self):
        assert image_url(100, 'a_abc123') == (
            'https://cdn.discordapp.com/guild-events/100/a_abc123.gif'
        )

    def test_prefix_must_be_at_start(self):
        assert image_url(100, 'ba_c').endswith('.png')
        assert image_url(100, 'A_c').endswith('.png')

    def test_missing_hash(self):
        assert image_url(100, None) is None

    def test_event_property(self, cache, executor):
        event = make_event(cache, executor)
        assert event.image_url is None

        event.image = 'a_cover'
        assert event.image_url.endswith('/100/a_cover.gif')


class TestStatusAndType:
    """Test cases for wire key mapping."""

    def test_status_known_keys_round_trip(self):
        for status in Status:
            assert Status.from_key(status.key) is status

    def test_type_known_keys_round_trip(self):
        for event_type in Type:
            assert Type.from_key(event_type.key) is event_type

    @pytest.mark.parametrize('key', [0, 5, 99, -2, 2 ** 40])
    def test_unknown_keys_map_to_unknown(self, key):
        assert Status.from_key(key) is Status.UNKNOWN
        assert Type.from_key(key) is Type.UNKNOWN

    def test_status_keys(self):
        assert Status.SCHEDULED.key == 1
        assert Status.ACTIVE.key == 2
        assert Status.COMPLETED.key == 3
        assert Status.CANCELED.key == 4
        assert Status.UNKNOWN.key == -1

    def test_terminal_statuses(self):
        assert Status.COMPLETED.is_terminal
        assert Status.CANCELED.is_terminal
        assert not Status.SCHEDULED.is_terminal
        assert not Status.ACTIVE.is_terminal


class TestIdentity:
    """Test cases for equality and hashing."""

    def test_equal_ids_with_different_fields(self, cache, executor):
        first = make_event(cache, executor, event_id=100)
        second = make_event(cache, executor, event_id=100)
        second.name = 'Renamed'
        second.status = Status.CANCELED
        second.start_time = T1 + timedelta(days=3)

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_different_ids_not_equal(self, cache, executor):
        assert make_event(cache, executor, 100) != make_event(cache, executor, 200)

    def test_not_equal_to_other_types(self, cache, executor):
        event = make_event(cache, executor)
        assert event != 100
        assert event != None  # noqa: E711


class TestOrdering:
    """Test cases for compare_to and rich comparisons."""

    def test_same_start_time_orders_by_id(self, cache, executor):
        first = make_event(cache, executor, event_id=100)
        second = make_event(cache, executor, event_id=200)

        assert first.compare_to(second) < 0
        assert second.compare_to(first) > 0
        assert first < second

    def test_start_time_is_primary_key(self, cache, executor):
        early = make_event(cache, executor, event_id=900, start_time=T1)
        late = make_event(
            cache, executor, event_id=100, start_time=T1 + timedelta(minutes=1)
        )

        assert early.compare_to(late) < 0
        assert sorted([late, early]) == [early, late]

    def test_start_time_compared_as_instants(self, cache, executor):
        plus_two = timezone(timedelta(hours=2))
        # 20:00+02:00 is 18:00 UTC, earlier than 19:00 UTC
        first = make_event(
            cache, executor, event_id=200,
            start_time=datetime(2024, 1, 15, 20, 0, tzinfo=plus_two)
        )
        second = make_event(cache, executor, event_id=100, start_time=T1)

        assert first < second

    def test_same_instant_in_different_offsets_ties_on_id(self, cache, executor):
        plus_two = timezone(timedelta(hours=2))
        first = make_event(cache, executor, event_id=100, start_time=T1)
        second = make_event(
            cache, executor, event_id=200,
            start_time=T1.astimezone(plus_two)
        )

        assert first.compare_to(second) < 0

    def test_naive_start_time_read_as_utc(self, cache, executor):
        naive = make_event(
            cache, executor, event_id=200, start_time=T1.replace(tzinfo=None)
        )
        aware = make_event(cache, executor, event_id=100, start_time=T1)

        assert aware.compare_to(naive) < 0
        assert naive.compare_to(aware) > 0
        assert sorted([naive, aware]) == [aware, naive]

    def test_compare_with_itself(self, cache, executor):
        event = make_event(cache, executor)
        assert event.compare_to(event) == 0
        assert event <= event
        assert event >= event

    def test_order_is_transitive(self, cache, executor):
        a = make_event(cache, executor, event_id=300, start_time=T1)
        b = make_event(cache, executor, event_id=100, start_time=T1 + timedelta(hours=1))
        c = make_event(cache, executor, event_id=200, start_time=T1 + timedelta(hours=1))

        assert a < b and b < c and a < c
        assert sorted([c, a, b]) == [a, b, c]

    def test_compare_with_none_raises(self, cache, executor):
        with pytest.raises(ValueError):
            make_event(cache, executor).compare_to(None)

    def test_compare_across_guilds_raises(self, cache, executor):
        event = make_event(cache, executor, event_id=100)
        foreign = make_event(cache, executor, event_id=200, guild_id=OTHER_GUILD_ID)

        with pytest.raises(ValueError):
            event.compare_to(foreign)
        with pytest.raises(ValueError):
            sorted([event, foreign])


class TestLocation:
    """Test cases for derived type, channel and location."""

    def test_no_location_is_unknown(self, cache, executor):
        event = make_event(cache, executor)

        assert event.type is Type.UNKNOWN
        assert event.channel is None
        assert event.location is None

    def test_stage_event(self, cache, executor):
        event = make_event(cache, executor)
        event.stage_channel = StageChannel(id=555, guild_id=GUILD_ID, name='Stage')

        assert event.type is Type.STAGE_INSTANCE
        assert event.channel is event.stage_channel
        assert event.location == '555'

    def test_voice_event(self, cache, executor):
        event = make_event(cache, executor)
        event.voice_channel = VoiceChannel(id=777, guild_id=GUILD_ID, name='Voice')

        assert event.type is Type.VOICE
        assert event.channel is event.voice_channel
        assert event.location == '777'

    def test_external_event(self, cache, executor):
        event = make_event(cache, executor)
        event.external_location = 'Town Square'

        assert event.type is Type.EXTERNAL
        assert event.channel is None
        assert event.location == 'Town Square'

    def test_stage_wins_over_external(self, cache, executor):
        event = make_event(cache, executor)
        event.stage_channel = StageChannel(id=555, guild_id=GUILD_ID, name='Stage')
        event.external_location = 'Town Square'

        assert event.type is Type.STAGE_INSTANCE
        assert event.location == '555'

    def test_voice_wins_over_external(self, cache, executor):
        event = make_event(cache, executor)
        event.voice_channel = VoiceChannel(id=777, guild_id=GUILD_ID, name='Voice')
        event.external_location = 'Town Square'

        assert event.type is Type.VOICE

    def test_stage_wins_over_voice(self, cache, executor):
        event = make_event(cache, executor)
        event.stage_channel = StageChannel(id=555, guild_id=GUILD_ID, name='Stage')
        event.voice_channel = VoiceChannel(id=777, guild_id=GUILD_ID, name='Voice')

        assert event.type is Type.STAGE_INSTANCE
        assert event.channel is event.stage_channel


class TestCreator:
    """Test cases for creator metadata."""

    def test_zero_creator_id_is_absent(self, cache, executor):
        event = make_event(cache, executor)
        event.creator = User(id=42, name='someone')
        event.creator_id_raw = 0

        assert event.creator_id is None
        assert event.creator is not None

    def test_creator_id_without_cached_user(self, cache, executor):
        event = make_event(cache, executor)
        event.creator_id_raw = 42

        assert event.creator_id == 42
        assert event.creator is None


class TestActions:
    """Test cases for delete, pagination and manager actions."""

    def test_delete_without_permission_makes_no_call(self, cache, executor):
        cache.get_guild(GUILD_ID).self_member.permissions = Permission.VIEW_CHANNEL
        event = make_event(cache, executor)

        with pytest.raises(InsufficientPermissionError) as exc_info:
            event.delete()

        assert exc_info.value.permission is Permission.MANAGE_EVENTS
        assert exc_info.value.guild_id == GUILD_ID
        assert executor.mock_calls == []

    def test_delete_in_uncached_guild_raises(self, cache, executor):
        event = make_event(cache, executor, guild_id=12345)

        with pytest.raises(InsufficientPermissionError):
            event.delete()
        assert executor.mock_calls == []

    def test_delete_is_deferred(self, cache, executor):
        event = make_event(cache, executor)

        action = event.delete()

        assert isinstance(action, RestAction)
        assert action.route.method == 'DELETE'
        assert action.route.path == f'guilds/{GUILD_ID}/scheduled-events/100'
        executor.execute.assert_not_called()

    def test_delete_with_administrator(self, cache, executor):
        cache.get_guild(GUILD_ID).self_member.permissions = Permission.ADMINISTRATOR
        event = make_event(cache, executor)

        assert event.delete().route.method == 'DELETE'

    def test_delete_completion_evicts_from_cache(self, cache, executor):
        executor.execute.return_value = None
        event = make_event(cache, executor)
        cache.put_scheduled_event(event)

        action = event.delete().reason('cleanup')
        result = action.complete()

        assert result is None
        executor.execute.assert_called_once_with(
            action.route, body=None, params=None, reason='cleanup'
        )
        assert cache.get_scheduled_event(100) is None

    def test_retrieve_interested_users(self, cache, executor):
        action = make_event(cache, executor).retrieve_interested_users()

        assert isinstance(action, ScheduledEventUsersPaginationAction)
        assert action.guild_id == GUILD_ID
        assert action.event_id == 100
        executor.execute.assert_not_called()

    def test_retrieve_interested_members(self, cache, executor):
        action = make_event(cache, executor).retrieve_interested_members()

        assert isinstance(action, ScheduledEventMembersPaginationAction)
        executor.execute.assert_not_called()

    def test_get_manager_returns_fresh_instances(self, cache, executor):
        event = make_event(cache, executor)

        first = event.get_manager()
        second = event.get_manager()
        first.set_name('Changed')

        assert isinstance(first, ScheduledEventManager)
        assert first is not second
        assert second.changes == {}
        assert (first.guild_id, first.event_id) == (GUILD_ID, 100)
        assert event.name == 'Event 100'


def test_repr_and_url(cache, executor):
    event = make_event(cache, executor)

    assert repr(event) == f"<ScheduledEvent id=100 name='Event 100' guild_id={GUILD_ID}>"
    assert event.url == f'https://discord.com/events/{GUILD_ID}/100'
    assert event.guild.name == 'Test Guild'
