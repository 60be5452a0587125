import asyncio

import pytest

from models.errors import NetworkError, UnknownServerError
from services.query_cache import ActiveQuery, QueryCache, QueryKey, QueryStatus


class ControlledFetcher:
    """Fetch functions whose results are released by the test."""

    def __init__(self):
        self.calls: list[QueryKey] = []
        self.pending: list[tuple[QueryKey, asyncio.Future]] = []

    def fetcher_for(self, key: QueryKey):
        async def fetch():
            self.calls.append(key)
            future = asyncio.get_running_loop().create_future()
            self.pending.append((key, future))
            return await future

        return fetch

    def resolve(self, index: int, value=None, error: Exception | None = None):
        _, future = self.pending[index]
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)


async def _spin():
    for _ in range(5):
        await asyncio.sleep(0)


def test_query_keys_equal_by_value():
    a = QueryKey.of("brands-by-owner", owner="acme")
    b = QueryKey.of("brands-by-owner", owner="acme")

    assert a == b
    assert hash(a) == hash(b)
    assert {a: 1}[b] == 1


def test_query_key_param_order_does_not_matter():
    a = QueryKey.of("brands", owner="acme", page=2)
    b = QueryKey.of("brands", page=2, owner="acme")
    assert a == b
    assert a.as_params() == {"owner": "acme", "page": 2}


def test_query_keys_differ_on_resource_or_value():
    assert QueryKey.of("brands", owner="acme") != QueryKey.of("brands-by-owner", owner="acme")
    assert QueryKey.of("brands-by-owner", owner="acme") != QueryKey.of("brands-by-owner", owner="acm")


def test_inactive_query_does_not_fetch():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    assert query.set_key(None) is None
    assert fetcher.calls == []
    assert query.data is None
    assert query.is_loading is False
    assert query.status == QueryStatus.IDLE


@pytest.mark.asyncio
async def test_fetch_populates_entry():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)
    key = QueryKey.of("brands")

    task = query.set_key(key)
    await _spin()
    assert query.is_loading is True
    assert query.status == QueryStatus.LOADING

    fetcher.resolve(0, ["a", "b"])
    await task

    assert query.data == ["a", "b"]
    assert query.is_loading is False
    assert query.status == QueryStatus.SUCCESS
    assert query.entry.last_fetched_at is not None


@pytest.mark.asyncio
async def test_concurrent_consumers_share_one_request():
    fetcher = ControlledFetcher()
    cache = QueryCache()
    first = ActiveQuery(cache, fetcher.fetcher_for)
    second = ActiveQuery(cache, fetcher.fetcher_for)
    key = QueryKey.of("brands-by-owner", owner="acme")

    task_a = first.set_key(key)
    task_b = second.set_key(QueryKey.of("brands-by-owner", owner="acme"))
    await _spin()

    assert task_a is task_b
    assert len(fetcher.calls) == 1

    fetcher.resolve(0, ["acme"])
    await task_a
    assert first.data == second.data == ["acme"]


@pytest.mark.asyncio
async def test_same_key_again_is_noop():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)
    key = QueryKey.of("brands")

    task = query.set_key(key)
    await _spin()
    fetcher.resolve(0, [])
    await task

    assert query.set_key(QueryKey.of("brands")) is None
    await _spin()
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_returning_to_cached_key_revalidates_but_shows_cached_data():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)
    k1 = QueryKey.of("brands")
    k2 = QueryKey.of("brands-by-owner", owner="acme")

    task = query.set_key(k1)
    await _spin()
    fetcher.resolve(0, ["all"])
    await task
    task = query.set_key(k2)
    await _spin()
    fetcher.resolve(1, ["acme"])
    await task

    task = query.set_key(k1)
    await _spin()
    assert len(fetcher.calls) == 3
    assert query.data == ["all"]
    assert query.is_loading is False
    assert query.is_validating is True

    fetcher.resolve(2, ["all", "new"])
    await task
    assert query.data == ["all", "new"]


@pytest.mark.asyncio
async def test_stale_key_response_is_not_displayed():
    fetcher = ControlledFetcher()
    cache = QueryCache()
    query = ActiveQuery(cache, fetcher.fetcher_for)
    k1 = QueryKey.of("brands-by-owner", owner="ac")
    k2 = QueryKey.of("brands-by-owner", owner="acme")
    seen = []
    query.subscribe(lambda q: seen.append(q.data))

    task_1 = query.set_key(k1)
    await _spin()
    task_2 = query.set_key(k2)
    await _spin()

    fetcher.resolve(0, ["stale"])
    await task_1
    assert query.data is None
    assert cache.peek(k1).data == ["stale"]
    assert ["stale"] not in seen

    fetcher.resolve(1, ["fresh"])
    await task_2
    assert query.data == ["fresh"]
    assert seen[-1] == ["fresh"]


@pytest.mark.asyncio
async def test_refetch_failure_keeps_last_good_data():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    task = query.set_key(QueryKey.of("brands"))
    await _spin()
    fetcher.resolve(0, ["good"])
    await task

    task = query.refetch()
    await _spin()
    fetcher.resolve(1, error=NetworkError())
    await task

    assert query.data == ["good"]
    assert isinstance(query.error, NetworkError)
    assert query.status == QueryStatus.ERROR


@pytest.mark.asyncio
async def test_success_after_error_clears_error():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    task = query.set_key(QueryKey.of("brands"))
    await _spin()
    fetcher.resolve(0, error=NetworkError())
    await task
    assert query.data is None
    assert query.error is not None

    task = query.refetch()
    await _spin()
    fetcher.resolve(1, ["ok"])
    await task
    assert query.error is None
    assert query.data == ["ok"]


@pytest.mark.asyncio
async def test_retry_without_data_shows_loading_instead_of_old_error():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    task = query.set_key(QueryKey.of("brands"))
    await _spin()
    fetcher.resolve(0, error=NetworkError())
    await task

    task = query.refetch()
    assert query.is_loading
    assert query.error is None
    assert query.status == QueryStatus.LOADING

    await _spin()
    fetcher.resolve(1, ["ok"])
    await task


@pytest.mark.asyncio
async def test_retry_with_data_keeps_error_overlay():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    task = query.set_key(QueryKey.of("brands"))
    await _spin()
    fetcher.resolve(0, ["good"])
    await task
    task = query.refetch()
    await _spin()
    fetcher.resolve(1, error=NetworkError())
    await task

    task = query.refetch()
    assert isinstance(query.error, NetworkError)
    assert query.data == ["good"]

    await _spin()
    fetcher.resolve(2, ["fresh"])
    await task


@pytest.mark.asyncio
async def test_refetch_during_flight_waits_and_newest_wins():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)

    first = query.set_key(QueryKey.of("brands"))
    await _spin()
    second = query.refetch()
    await _spin()

    # the forced fetch does not hit the wire while the first is outstanding
    assert len(fetcher.calls) == 1

    fetcher.resolve(0, ["before write"])
    await first
    await _spin()
    assert len(fetcher.calls) == 2
    assert query.data is None

    fetcher.resolve(1, ["after write"])
    await second
    assert query.data == ["after write"]


@pytest.mark.asyncio
async def test_unexpected_fetcher_exception_is_stored_as_unknown_error():
    async def broken():
        raise KeyError("data")

    query = ActiveQuery(QueryCache(), lambda key: broken)
    await query.set_key(QueryKey.of("brands"))

    assert isinstance(query.error, UnknownServerError)
    assert query.is_validating is False


@pytest.mark.asyncio
async def test_settled_waits_for_active_key():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)
    query.set_key(QueryKey.of("brands"))
    await _spin()

    waiter = asyncio.ensure_future(query.settled())
    await _spin()
    assert not waiter.done()

    fetcher.resolve(0, ["x"])
    entry = await waiter
    assert entry.data == ["x"]


@pytest.mark.asyncio
async def test_closed_query_stops_notifying():
    fetcher = ControlledFetcher()
    query = ActiveQuery(QueryCache(), fetcher.fetcher_for)
    seen = []
    query.subscribe(lambda q: seen.append(q.status))

    task = query.set_key(QueryKey.of("brands"))
    await _spin()
    query.close()
    count = len(seen)
    fetcher.resolve(0, [])
    await task

    assert len(seen) == count
