import asyncio
import json

import pytest

from atproto_invaders.errors import NoIdentifier
from atproto_invaders.identity import (
    HANDLE_KEY,
    DailyQuota,
    Session,
    SocialStatsClient,
    calculate_multiplier,
    handle_hash,
    simulate_ammunition,
    simulate_tags,
)
from atproto_invaders.storage import MemoryStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class BrokenStore(MemoryStore):
    def set(self, key, value):
        raise OSError("disk full")


class UnreadableStore(MemoryStore):
    def get(self, key):
        raise OSError("store unavailable")


def resolver_for(value):
    calls = []

    async def resolve():
        calls.append(value)
        return value

    resolve.calls = calls
    return resolve


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    return SocialStatsClient(store=store, resolver=resolver_for("alice.bsky.social"))


class TestHash:
    def test_known_values(self):
        assert handle_hash("") == 0
        assert handle_hash("a") == 97
        assert handle_hash("ab") == 97 * 31 + 98

    def test_wraps_to_signed_32_bits(self):
        value = handle_hash("a-rather-long-handle.bsky.social")
        assert -(2**31) <= value < 2**31

    def test_deterministic(self):
        assert handle_hash("alice.bsky.social") == handle_hash("alice.bsky.social")
        assert simulate_tags("alice.bsky.social") == simulate_tags("alice.bsky.social")

    def test_ammunition(self):
        assert simulate_ammunition("ab") == 155
        for handle in ("alice", "bob.bsky.social", "x" * 200):
            assert 50 <= simulate_ammunition(handle) <= 1049

    def test_tags(self):
        assert simulate_tags("ab") == ["music", "gaming"]
        for handle in ("alice", "bob.bsky.social", "x" * 200):
            tags = simulate_tags(handle)
            assert 1 <= len(tags) <= 4
            assert len(set(tags)) == len(tags)


@pytest.mark.parametrize(
    "count, expected", [(1, 1.2), (2, 1.4), (5, 2.0), (8, 2.0)]
)
def test_multiplier(count, expected):
    assert calculate_multiplier(["tag"] * count) == pytest.approx(expected)


def test_multiplier_two_tags_is_exact():
    assert calculate_multiplier(["a", "b"]) == 1.4
    assert calculate_multiplier(("a", "b")) == 1.4


class TestAuthenticate:
    def test_resolver_used_and_handle_stored(self, client, store):
        session = asyncio.run(client.authenticate())
        assert session.handle == "alice.bsky.social"
        assert session.authenticated
        assert store.get(HANDLE_KEY) == "alice.bsky.social"

    def test_stored_handle_wins(self, store):
        store.set(HANDLE_KEY, "  stored.handle  ")
        resolver = resolver_for("other")
        client = SocialStatsClient(store=store, resolver=resolver)
        session = asyncio.run(client.authenticate())
        assert session.handle == "stored.handle"
        assert resolver.calls == []

    def test_session_cached(self, store):
        resolver = resolver_for("alice")
        client = SocialStatsClient(store=MemoryStore(), resolver=resolver)
        first = asyncio.run(client.authenticate())
        second = asyncio.run(client.authenticate())
        assert first is second
        assert len(resolver.calls) == 1

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_handle(self, value):
        client = SocialStatsClient(resolver=resolver_for(value))
        with pytest.raises(NoIdentifier):
            asyncio.run(client.authenticate())

    def test_no_resolver(self):
        with pytest.raises(NoIdentifier):
            asyncio.run(SocialStatsClient().authenticate())

    def test_store_write_failure_is_not_fatal(self):
        client = SocialStatsClient(store=BrokenStore(), resolver=resolver_for("alice"))
        assert asyncio.run(client.authenticate()).handle == "alice"


class TestStats:
    def test_ammunition_generated_and_stored(self, client, store):
        session = Session(handle="ab")
        assert asyncio.run(client.get_ammunition_seed(session)) == 155
        assert store.get("likes_count_ab") == "155"

    def test_ammunition_from_store(self, client, store):
        store.set("likes_count_ab", "42")
        assert asyncio.run(client.get_ammunition_seed(Session(handle="ab"))) == 42

    def test_corrupt_ammunition_regenerated(self, client, store):
        store.set("likes_count_ab", "lots")
        assert asyncio.run(client.get_ammunition_seed(Session(handle="ab"))) == 155
        assert store.get("likes_count_ab") == "155"

    def test_ammunition_defaults_on_failure(self, client):
        assert asyncio.run(client.get_ammunition_seed(None)) == 100
        assert asyncio.run(client.get_ammunition_seed(Session(handle=""))) == 100

        broken = SocialStatsClient(store=BrokenStore())
        assert asyncio.run(broken.get_ammunition_seed(Session(handle="ab"))) == 100

    def test_stats_default_when_store_cannot_be_read(self):
        unreadable = SocialStatsClient(store=UnreadableStore())
        session = Session(handle="ab")
        assert asyncio.run(unreadable.get_ammunition_seed(session)) == 100
        assert asyncio.run(unreadable.get_multiplier_inputs(session)) == ["basic"]

    def test_tags_generated_and_stored(self, client, store):
        tags = asyncio.run(client.get_multiplier_inputs(Session(handle="ab")))
        assert tags == ["music", "gaming"]
        assert json.loads(store.get("lexicons_ab")) == tags

    def test_tags_default_on_failure(self, client, store):
        assert asyncio.run(client.get_multiplier_inputs(None)) == ["basic"]
        store.set("lexicons_zz", "{broken")
        assert asyncio.run(client.get_multiplier_inputs(Session(handle="zz"))) == [
            "basic"
        ]
        store.set("lexicons_yy", "[]")
        assert asyncio.run(client.get_multiplier_inputs(Session(handle="yy"))) == [
            "basic"
        ]

    def test_cache_expires(self, store):
        clock = FakeClock()
        client = SocialStatsClient(store=store, clock=clock, cache_timeout=300)
        session = Session(handle="ab")
        assert asyncio.run(client.get_ammunition_seed(session)) == 155

        store.set("likes_count_ab", "7")
        assert asyncio.run(client.get_ammunition_seed(session)) == 155

        clock.now += 301
        assert asyncio.run(client.get_ammunition_seed(session)) == 7

    def test_clear_cache(self, client, store):
        session = Session(handle="ab")
        asyncio.run(client.get_ammunition_seed(session))
        store.set("likes_count_ab", "9")
        client.clear_cache()
        assert asyncio.run(client.get_ammunition_seed(session)) == 9


class TestDailyQuota:
    def test_fresh_quota(self, client):
        quota = client.check_daily_quota(Session(handle="ab"))
        assert quota == DailyQuota(used=0, limit=10)
        assert quota.remaining == 10

    def test_no_session(self, client):
        assert client.check_daily_quota(None).remaining == 10

    def test_record_session(self, store):
        client = SocialStatsClient(store=store, today=lambda: "2026-10-19")
        session = Session(handle="ab")
        for _ in range(3):
            client.record_session(session)
        assert store.get("daily_usage_ab_2026-10-19") == "3"
        assert client.check_daily_quota(session).remaining == 7

    def test_quota_is_per_day(self, store):
        day = ["2026-10-19"]
        client = SocialStatsClient(store=store, today=lambda: day[0])
        session = Session(handle="ab")
        client.record_session(session)
        day[0] = "2026-10-20"
        assert client.check_daily_quota(session).used == 0

    def test_remaining_never_negative(self, store):
        client = SocialStatsClient(store=store, today=lambda: "d")
        store.set("daily_usage_ab_d", "12")
        assert client.check_daily_quota(Session(handle="ab")).remaining == 0

    def test_corrupt_usage_counts_as_zero(self, store):
        client = SocialStatsClient(store=store, today=lambda: "d")
        store.set("daily_usage_ab_d", "many")
        assert client.check_daily_quota(Session(handle="ab")).used == 0

    def test_record_failure_is_swallowed(self):
        client = SocialStatsClient(store=BrokenStore())
        client.record_session(Session(handle="ab"))
        client.record_session(None)

    def test_record_with_unreadable_store_is_swallowed(self):
        client = SocialStatsClient(store=UnreadableStore())
        client.record_session(Session(handle="ab"))
