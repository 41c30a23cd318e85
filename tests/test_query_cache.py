from gymdesk.app.core.cache import QueryCache, query_keys


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_get_or_load_caches_successful_results():
    cache = QueryCache(ttl_seconds=60)
    calls = []

    def loader():
        calls.append(1)
        return "members"

    assert cache.get_or_load(("members", "list"), loader) == "members"
    assert cache.get_or_load(("members", "list"), loader) == "members"
    assert len(calls) == 1
    assert cache.get_stats()["hits"] == 1


def test_rejected_results_are_not_cached():
    cache = QueryCache(ttl_seconds=60)
    calls = []

    def loader():
        calls.append(1)
        return ("boom", "error")

    cache.get_or_load(("members", "stats"), loader, should_cache=lambda result: result[1] is None)
    cache.get_or_load(("members", "stats"), loader, should_cache=lambda result: result[1] is None)
    assert len(calls) == 2


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = QueryCache(ttl_seconds=300, clock=clock)
    cache.set(("plans", "stats"), {"totalPlans": 3})
    clock.now = 299
    assert cache.get(("plans", "stats")) == {"totalPlans": 3}
    clock.now = 301
    assert cache.get(("plans", "stats")) is None


def test_invalidate_by_prefix():
    cache = QueryCache(ttl_seconds=60)
    cache.set(query_keys.members_list({"status": "active"}), [1])
    cache.set(query_keys.member_stats(), {})
    cache.set(query_keys.sessions_calendar("2030-01-01", "2030-01-31"), [])
    cache.set(query_keys.session_comments("abc"), [])
    cache.set(query_keys.dashboard("stats"), {})

    assert cache.invalidate(("members",), ("dashboard",)) == 3
    assert cache.get_stats()["keys_cached"] == 2

    assert cache.invalidate(query_keys.session_comments("abc")) == 1
    assert cache.get(query_keys.sessions_calendar("2030-01-01", "2030-01-31")) == []


def test_filter_keys_ignore_order_and_empty_values():
    assert query_keys.members_list({"status": "active", "searchTerm": None}) == query_keys.members_list(
        {"status": "active"}
    )
    assert query_keys.trainers_list({"a": 1, "b": 2}) == query_keys.trainers_list({"b": 2, "a": 1})
