"""
Unit tests for the client-side profile cache.
"""

import pytest

from app.client.profile_cache import ProfileCache


class FakeClock:

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class CountingFetcher:

    def __init__(self):
        self.calls = 0
        self.fail = False

    def __call__(self):
        self.calls += 1
        if self.fail:
            raise ConnectionError("server unavailable")
        return {"user_id": 1, "first_name": "Asha", "skills": [], "projects": [], "version": self.calls}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return CountingFetcher()


@pytest.fixture
def cache(fetcher, clock):
    return ProfileCache(fetcher, ttl_seconds=300, clock=clock)


class TestGetProfile:

    def test_first_read_fetches(self, cache, fetcher, clock):
        profile = cache.get_profile()
        assert fetcher.calls == 1
        assert profile["first_name"] == "Asha"
        assert cache.last_fetched == clock.now

    def test_fresh_read_does_no_io(self, cache, fetcher, clock):
        cache.get_profile()
        clock.advance(120)
        cache.get_profile()
        assert fetcher.calls == 1

    def test_expired_read_fetches_again(self, cache, fetcher, clock):
        cache.get_profile()
        clock.advance(300)
        profile = cache.get_profile()
        assert fetcher.calls == 2
        assert profile["version"] == 2

    def test_force_refresh_bypasses_fresh_entry(self, cache, fetcher):
        cache.get_profile()
        cache.get_profile(force_refresh=True)
        assert fetcher.calls == 2

    def test_returned_profile_is_a_copy(self, cache, fetcher):
        first = cache.get_profile()
        first["first_name"] = "edited"
        first["skills"].append({"skill_id": 9, "skill_name": "Go"})

        again = cache.get_profile()
        assert fetcher.calls == 1
        assert again["first_name"] == "Asha"
        assert again["skills"] == []

    def test_failed_fetch_keeps_previous_entry(self, cache, fetcher, clock):
        cache.get_profile()
        stamped = cache.last_fetched
        clock.advance(400)
        fetcher.fail = True

        with pytest.raises(ConnectionError):
            cache.get_profile()

        assert cache.profile["version"] == 1
        assert cache.last_fetched == stamped


class TestLocalPatches:

    def test_patch_without_cached_profile_is_noop(self, cache, fetcher):
        assert cache.append_item("skills", {"skill_id": 1, "skill_name": "Python"}) is False
        assert cache.profile is None
        assert fetcher.calls == 0

    def test_patch_restamps_last_fetched(self, cache, clock):
        cache.get_profile()
        clock.advance(250)
        cache.merge_fields({"first_name": "Asha R"})
        assert cache.last_fetched == clock.now

        # Still fresh 250s after the patch, although 500s after the fetch
        clock.advance(250)
        assert cache.is_fresh()
        assert cache.get_profile()["first_name"] == "Asha R"

    def test_append_replace_remove(self, cache):
        cache.get_profile()
        cache.append_item("projects", {"project_id": 7, "title": "Compiler"})
        cache.append_item("projects", {"project_id": 8, "title": "Chess engine"})
        cache.replace_item("projects", "project_id", {"project_id": 7, "title": "Toy compiler"})
        cache.remove_item("projects", "project_id", 8)

        assert cache.profile["projects"] == [{"project_id": 7, "title": "Toy compiler"}]

    def test_appended_item_is_copied(self, cache):
        cache.get_profile()
        item = {"skill_id": 3, "skill_name": "SQL"}
        cache.append_item("skills", item)
        item["skill_name"] = "changed"
        assert cache.profile["skills"][0]["skill_name"] == "SQL"


class TestInvalidate:

    def test_invalidate_forces_next_fetch(self, cache, fetcher):
        cache.get_profile()
        cache.invalidate()
        assert cache.profile is None
        assert cache.last_fetched is None
        assert not cache.is_fresh()

        cache.get_profile()
        assert fetcher.calls == 2
