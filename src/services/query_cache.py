"""
Keyed fetch cache with request deduplication and revalidation.

QueryCache owns one CacheEntry per QueryKey and at most one request on the
wire per key. ActiveQuery is the consumer side: it observes exactly one key
at a time, revalidates whenever that key changes and only surfaces results
belonging to the key it currently observes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from models.errors import ApiError, UnknownServerError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[["QueryKey", "CacheEntry"], None]


@dataclass(frozen=True)
class QueryKey:
    resource: str
    params: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, resource: str, **params: Any) -> "QueryKey":
        return cls(resource, tuple(sorted(params.items())))

    def as_params(self) -> dict[str, Any]:
        return dict(self.params)

    def __str__(self) -> str:
        if not self.params:
            return self.resource
        args = ", ".join(f"{k}={v!r}" for k, v in self.params)
        return f"{self.resource}({args})"


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CacheEntry:
    data: Any = None
    status: QueryStatus = QueryStatus.IDLE
    error: Optional[ApiError] = None
    last_fetched_at: Optional[datetime] = None
    issued: int = field(default=0, repr=False)

    @property
    def has_data(self) -> bool:
        return self.data is not None


class QueryCache:
    def __init__(self):
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._in_flight: dict[QueryKey, asyncio.Task] = {}
        self._listeners: list[Listener] = []

    def entry(self, key: QueryKey) -> CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry()
            self._entries[key] = entry
        return entry

    def peek(self, key: QueryKey) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def in_flight(self, key: QueryKey) -> Optional[asyncio.Task]:
        return self._in_flight.get(key)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def fetch(self, key: QueryKey, fetcher: Fetcher, force: bool = False) -> asyncio.Task:
        """Start (or join) a fetch for ``key`` and return the task settling it.

        Without ``force`` a fetch already in flight for the key is joined
        instead of issuing a duplicate. With ``force`` a new fetch is issued;
        it waits for the in-flight one to finish first so requests for one key
        never overlap, and only the newest fetch may write the entry.
        """
        previous = self._in_flight.get(key)
        if previous is not None and not force:
            logger.debug(f"Joining in-flight fetch for {key}")
            return previous

        entry = self.entry(key)
        entry.issued += 1
        entry.status = QueryStatus.LOADING
        if not entry.has_data:
            # a retry with nothing cached shows as loading, not as the old failure
            entry.error = None
        self._notify(key, entry)

        task = asyncio.ensure_future(self._run(key, fetcher, entry.issued, previous))
        self._in_flight[key] = task
        return task

    async def _run(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        sequence: int,
        previous: Optional[asyncio.Task],
    ) -> CacheEntry:
        entry = self._entries[key]
        try:
            if previous is not None:
                await asyncio.wait([previous])
            data = await fetcher()
        except ApiError as e:
            self._settle(key, sequence, error=e)
        except Exception as e:
            logger.exception(f"Unexpected failure fetching {key}")
            self._settle(key, sequence, error=UnknownServerError(str(e) or type(e).__name__, raw=e))
        else:
            self._settle(key, sequence, data=data)
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]
        return entry

    def _settle(
        self,
        key: QueryKey,
        sequence: int,
        data: Any = None,
        error: Optional[ApiError] = None,
    ) -> None:
        entry = self._entries[key]
        if sequence != entry.issued:
            logger.debug(f"Discarding superseded response #{sequence} for {key}")
            return

        if error is not None:
            # previous data stays visible underneath the error
            entry.error = error
            entry.status = QueryStatus.ERROR
            logger.info(f"Fetch for {key} failed: {error.message}")
        else:
            entry.data = data
            entry.error = None
            entry.status = QueryStatus.SUCCESS
            entry.last_fetched_at = datetime.now(timezone.utc)
        self._notify(key, entry)

    def _notify(self, key: QueryKey, entry: CacheEntry) -> None:
        for listener in list(self._listeners):
            listener(key, entry)


class ActiveQuery(Generic[T]):
    """Consumer view over a QueryCache, observing one key at a time.

    A ``None`` key means the query is inactive: nothing is fetched and no
    data is exposed.
    """

    def __init__(self, cache: QueryCache, fetcher_for: Callable[[QueryKey], Fetcher]):
        self._cache = cache
        self._fetcher_for = fetcher_for
        self._key: Optional[QueryKey] = None
        self._listeners: list[Callable[["ActiveQuery[T]"], None]] = []
        self._unsubscribe = cache.subscribe(self._on_cache_change)

    @property
    def key(self) -> Optional[QueryKey]:
        return self._key

    @property
    def entry(self) -> Optional[CacheEntry]:
        if self._key is None:
            return None
        return self._cache.peek(self._key)

    @property
    def data(self) -> Optional[T]:
        entry = self.entry
        return entry.data if entry else None

    @property
    def error(self) -> Optional[ApiError]:
        entry = self.entry
        return entry.error if entry else None

    @property
    def status(self) -> QueryStatus:
        entry = self.entry
        return entry.status if entry else QueryStatus.IDLE

    @property
    def is_validating(self) -> bool:
        return self._key is not None and self._cache.in_flight(self._key) is not None

    @property
    def is_loading(self) -> bool:
        return self.is_validating and self.data is None

    def set_key(self, key: Optional[QueryKey]) -> Optional[asyncio.Task]:
        if key == self._key:
            return self._cache.in_flight(key) if key is not None else None

        self._key = key
        if key is None:
            self._emit()
            return None
        # switching keys always revalidates, joining a request already on the wire
        task = self._cache.fetch(key, self._fetcher_for(key))
        self._emit()
        return task

    def refetch(self) -> Optional[asyncio.Task]:
        if self._key is None:
            return None
        return self._cache.fetch(self._key, self._fetcher_for(self._key), force=True)

    async def settled(self) -> Optional[CacheEntry]:
        """Wait until no fetch is in flight for the active key."""
        while self._key is not None:
            task = self._cache.in_flight(self._key)
            if task is None:
                break
            await asyncio.wait([task])
        return self.entry

    def subscribe(self, listener: Callable[["ActiveQuery[T]"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()

    def _on_cache_change(self, key: QueryKey, entry: CacheEntry) -> None:
        if key != self._key:
            return
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)
