"""
AT Protocol identity client.

Resolves the player's handle and derives the game's social stats from it:
ammunition from the likes count, the score multiplier from the diversity of
the categories the player posts in, and the daily play quota. There is no
network traffic; stats are simulated from a hash of the handle and persisted
in a key/value store so the same handle always gets the same numbers.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable, Protocol, Sequence

from atproto_invaders.constants import (
    CACHE_TIMEOUT,
    CATEGORY_TAGS,
    DAILY_LIMIT,
    DEFAULT_AMMUNITION,
    DEFAULT_TAGS,
    MAX_TAG_BONUS,
    TAG_BONUS,
)
from atproto_invaders.errors import (
    NoIdentifier,
    RecordSessionFailure,
    StatsFetchFailure,
)
from atproto_invaders.storage import MemoryStore
from atproto_invaders.utils import logger, to_int32

HANDLE_KEY = "at_protocol_handle"

CredentialResolver = Callable[[], Awaitable["str | None"]]


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


@dataclass(frozen=True)
class Session:
    """
    Authenticated player session
    """

    handle: str
    authenticated: bool = True
    created_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DailyQuota:
    used: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)


def handle_hash(handle: str) -> int:
    """
    Signed 32-bit string hash of a handle (``h = h * 31 + code``).

    :param handle: Player handle
    :type handle: str

    :return: Hash in the signed 32-bit range
    :rtype: int
    """
    value = 0
    for char in handle:
        value = to_int32((value << 5) - value + ord(char))
    return value


def simulate_ammunition(handle: str) -> int:
    """Likes count for a handle, between 50 and 1049."""
    return abs(handle_hash(handle)) % 1000 + 50


def simulate_tags(handle: str) -> list[str]:
    """
    Category tags for a handle: one to four distinct entries of
    ``CATEGORY_TAGS``.
    """
    value = handle_hash(handle)
    count = abs(value) % 4 + 1

    tags: list[str] = []
    for i in range(count):
        tag = CATEGORY_TAGS[abs(value + i) % len(CATEGORY_TAGS)]
        if tag not in tags:
            tags.append(tag)

    return tags or [CATEGORY_TAGS[0]]


def calculate_multiplier(tags: Sequence[str]) -> float:
    """
    Score multiplier for a set of category tags.

    Each tag adds 0.2 to the base of 1.0; the bonus is capped at 1.0.
    """
    return 1.0 + min(len(tags) * TAG_BONUS, MAX_TAG_BONUS)


class SocialStatsClient:
    """
    Identity/stats provider consumed by the game.

    :param store: Where handles and counters are kept
    :type store: KeyValueStore | None

    :param resolver: Coroutine function asked for a handle when none is stored
    :type resolver: CredentialResolver | None

    :param daily_limit: Games allowed per handle and day
    :type daily_limit: int
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        resolver: CredentialResolver | None = None,
        *,
        daily_limit: int = DAILY_LIMIT,
        cache_timeout: float = CACHE_TIMEOUT,
        clock: Callable[[], float] = time.time,
        today: Callable[[], str] | None = None,
    ):  # pylint: disable=too-many-arguments
        self.store = store if store is not None else MemoryStore()
        self.resolver = resolver
        self.daily_limit = daily_limit
        self.cache_timeout = cache_timeout
        self._clock = clock
        self._today = today or (lambda: date.today().isoformat())
        self._cache: dict[str, tuple[Any, float]] = {}

    async def authenticate(self) -> Session:
        """
        Return the player's session.

        Uses the cached session while it is fresh, then the stored handle,
        then the credential resolver.

        :raises NoIdentifier: If no handle can be obtained
        """
        cached = self._get_cache("user_session")
        if cached is not None and cached.handle and cached.authenticated:
            return cached

        identifier = self.store.get(HANDLE_KEY)
        if not identifier or not identifier.strip():
            if self.resolver is None:
                raise NoIdentifier("No identifier provided")
            identifier = await self.resolver()

        if not identifier or not identifier.strip():
            raise NoIdentifier("No identifier provided")

        identifier = identifier.strip()
        try:
            self.store.set(HANDLE_KEY, identifier)
        except OSError as e:
            logger.warning(f"Could not remember handle {identifier}: {e}")

        session = Session(handle=identifier, created_at=self._clock())
        self._set_cache("user_session", session)
        logger.info(f"Authenticated as {identifier}")
        return session

    async def get_ammunition_seed(self, session: Session | None) -> int:
        """
        Likes count used as the player's ammunition.

        Any failure, including one raised by the store, falls back to 100.

        :param session: Authenticated session
        :type session: Session | None

        :return: Non-negative likes count
        :rtype: int
        """
        try:
            return self._likes_count(session)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(f"Using default ammunition: {e!r}")
            return DEFAULT_AMMUNITION

    async def get_multiplier_inputs(self, session: Session | None) -> list[str]:
        """
        Category tags used for the multiplier.

        Any failure falls back to ``["basic"]``.

        :param session: Authenticated session
        :type session: Session | None

        :return: Non-empty list of tags
        :rtype: list[str]
        """
        try:
            return self._tags(session)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(f"Using default categories: {e!r}")
            return list(DEFAULT_TAGS)

    def _likes_count(self, session: Session | None) -> int:
        handle = _require_handle(session)
        key = f"likes_count_{handle}"

        cached = self._get_cache(key)
        if cached is not None:
            return cached

        stored = self.store.get(key)
        try:
            count = int(stored) if stored is not None else None
        except ValueError:
            count = None

        if count is None:
            count = simulate_ammunition(handle)
            try:
                self.store.set(key, str(count))
            except OSError as e:
                raise StatsFetchFailure(f"could not store likes count: {e}") from e

        self._set_cache(key, count)
        return count

    def _tags(self, session: Session | None) -> list[str]:
        handle = _require_handle(session)
        key = f"lexicons_{handle}"

        cached = self._get_cache(key)
        if cached:
            return cached

        stored = self.store.get(key)
        if stored is None:
            tags = simulate_tags(handle)
            try:
                self.store.set(key, json.dumps(tags))
            except OSError as e:
                raise StatsFetchFailure(f"could not store categories: {e}") from e
        else:
            try:
                tags = json.loads(stored)
            except ValueError as e:
                raise StatsFetchFailure(f"corrupt categories for {handle}") from e
            if not isinstance(tags, list) or not tags:
                raise StatsFetchFailure(f"corrupt categories for {handle}")

        self._set_cache(key, tags)
        return tags

    def check_daily_quota(self, session: Session | None) -> DailyQuota:
        """
        Games played today by the session's handle.

        :return: DailyQuota with used, limit and remaining
        """
        if session is None or not session.handle:
            return DailyQuota(used=0, limit=self.daily_limit)
        return DailyQuota(used=self._usage(session.handle), limit=self.daily_limit)

    def record_session(self, session: Session | None) -> None:
        """
        Count one game against today's quota. Failures are logged only.
        """
        if session is None or not session.handle:
            return

        try:
            used = self._usage(session.handle)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(f"Game session not recorded: {e!r}")
            return

        try:
            self._write_usage(session.handle, used + 1)
        except RecordSessionFailure as e:
            logger.warning(f"Game session not recorded: {e}")

    def _usage_key(self, handle: str) -> str:
        return f"daily_usage_{handle}_{self._today()}"

    def _usage(self, handle: str) -> int:
        try:
            return int(self.store.get(self._usage_key(handle)) or 0)
        except ValueError:
            return 0

    def _write_usage(self, handle: str, used: int) -> None:
        try:
            self.store.set(self._usage_key(handle), str(used))
        except Exception as e:  # pylint: disable=broad-except
            raise RecordSessionFailure(repr(e)) from e

    # Cache management

    def _set_cache(self, key: str, value: Any) -> None:
        self._cache[key] = (value, self._clock())

    def _get_cache(self, key: str) -> Any:
        entry = self._cache.get(key)
        if entry is None:
            return None

        value, stamp = entry
        if self._clock() - stamp > self.cache_timeout:
            del self._cache[key]
            return None
        return value

    def clear_cache(self) -> None:
        self._cache.clear()


def _require_handle(session: Session | None) -> str:
    if session is None or not session.handle:
        raise StatsFetchFailure("Invalid session provided")
    return session.handle
