"""Tests for the async GitHub REST client."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest
import respx

from dev_badge.cache import Cache
from dev_badge.config import AnalyzerConfig, DevBadgeConfig, FetchConfig
from dev_badge.exceptions import GitHubAPIError, RateLimitExhaustedError, UserNotFoundError
from dev_badge.github_client import GitHubClient
from dev_badge.models import ActivityEvent, GitHubUser, ProfileStats, RawRepository

BASE_URL = "https://api.github.com"
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _make_client(
    config: DevBadgeConfig | None = None,
    cache: Cache | None = None,
    token: str | None = "test-token",
) -> GitHubClient:
    return GitHubClient(token=token, config=config or DevBadgeConfig(), cache=cache)


def _user_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "login": "testuser",
        "id": 1,
        "avatar_url": "https://avatars.githubusercontent.com/u/1",
        "name": "Test User",
        "public_repos": 12,
        "public_gists": 4,
        "followers": 120,
        "following": 30,
        "created_at": "2018-06-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def _repo_payload(name: str, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": name,
        "full_name": f"testuser/{name}",
        "description": f"{name} description",
        "language": "Python",
        "stargazers_count": 3,
        "forks_count": 1,
        "open_issues_count": 0,
        "created_at": "2022-01-01T00:00:00Z",
        "updated_at": "2025-05-01T00:00:00Z",
        "topics": ["cli"],
        "license": {"key": "mit", "name": "MIT License"},
        "has_wiki": True,
        "fork": False,
    }
    payload.update(overrides)
    return payload


def _event_payload(created_at: datetime) -> dict[str, object]:
    return {
        "id": str(int(created_at.timestamp())),
        "type": "PushEvent",
        "actor": {"login": "testuser"},
        "created_at": created_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


# ---------------------------------------------------------------------------
# fetch_user
# ---------------------------------------------------------------------------


class TestFetchUser:
    @respx.mock
    async def test_fetch_user(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )

        async with _make_client() as client:
            user = await client.fetch_user("testuser")

        assert isinstance(user, GitHubUser)
        assert user.login == "testuser"
        assert user.followers == 120
        assert user.created_at == datetime(2018, 6, 1, tzinfo=UTC)
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer test-token"

    @respx.mock
    async def test_anonymous_request_has_no_auth_header(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )

        async with _make_client(token=None) as client:
            await client.fetch_user("testuser")

        assert "Authorization" not in route.calls.last.request.headers

    @respx.mock
    async def test_user_not_found(self) -> None:
        respx.get(f"{BASE_URL}/users/ghost").mock(
            return_value=httpx.Response(404, json={"message": "Not Found"})
        )

        async with _make_client() as client:
            with pytest.raises(UserNotFoundError) as exc_info:
                await client.fetch_user("ghost")

        assert exc_info.value.login == "ghost"
        assert exc_info.value.status_code == 404

    @respx.mock
    async def test_rate_limit_403(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(
                403,
                json={"message": "API rate limit exceeded for 1.2.3.4."},
                headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1748779200"},
            )
        )

        async with _make_client() as client:
            with pytest.raises(RateLimitExhaustedError) as exc_info:
                await client.fetch_user("testuser")

        assert exc_info.value.reset_at == datetime.fromtimestamp(1748779200, tz=UTC)

    @respx.mock
    async def test_rate_limit_429(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(429, text="")
        )

        async with _make_client() as client:
            with pytest.raises(RateLimitExhaustedError):
                await client.fetch_user("testuser")

    @respx.mock
    async def test_forbidden_without_rate_limit_message(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(403, json={"message": "Forbidden"})
        )

        async with _make_client() as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.fetch_user("testuser")

        assert not isinstance(exc_info.value, RateLimitExhaustedError)
        assert exc_info.value.status_code == 403

    @respx.mock
    async def test_server_error(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(
                502, json={"message": "Bad Gateway"}, headers={"X-RateLimit-Remaining": "41"}
            )
        )

        async with _make_client() as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.fetch_user("testuser")

        assert exc_info.value.status_code == 502
        assert exc_info.value.rate_limit_remaining == 41

    @respx.mock
    async def test_custom_base_url(self) -> None:
        respx.get("https://ghe.example.com/api/v3/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        config = DevBadgeConfig(fetch=FetchConfig(base_url="https://ghe.example.com/api/v3"))

        async with _make_client(config=config) as client:
            user = await client.fetch_user("testuser")

        assert user.login == "testuser"

    @respx.mock
    async def test_cached_profile_skips_request(self, tmp_path: Path) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        cache = Cache(db_path=tmp_path / "cache.db")

        async with _make_client(cache=cache) as client:
            first = await client.fetch_user("testuser")
            second = await client.fetch_user("testuser")

        assert route.call_count == 1
        assert first == second
        assert cache.stats()["categories"] == {"user_profile": 1}
        cache.close()

    @respx.mock
    async def test_non_json_body(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, text="<html>maintenance</html>")
        )

        async with _make_client() as client:
            with pytest.raises(GitHubAPIError, match="non-JSON"):
                await client.fetch_user("testuser")


class TestFetchAuthenticatedUser:
    @respx.mock
    async def test_fetch_authenticated_user(self) -> None:
        respx.get(f"{BASE_URL}/user").mock(
            return_value=httpx.Response(200, json=_user_payload(login="me"))
        )

        async with _make_client() as client:
            user = await client.fetch_authenticated_user()

        assert user.login == "me"

    async def test_requires_token(self) -> None:
        async with _make_client(token=None) as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.fetch_authenticated_user()

        assert exc_info.value.status_code == 401


# ---------------------------------------------------------------------------
# fetch_repositories / fetch_events
# ---------------------------------------------------------------------------


class TestFetchRepositories:
    @respx.mock
    async def test_fetch_repositories(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/repos").mock(
            return_value=httpx.Response(
                200,
                json=[
                    _repo_payload("cli-tool"),
                    _repo_payload("fork-of-x", fork=True, license=None, topics=None),
                ],
            )
        )

        async with _make_client() as client:
            repos = await client.fetch_repositories("testuser")

        assert [repo.name for repo in repos] == ["cli-tool", "fork-of-x"]
        assert all(isinstance(repo, RawRepository) for repo in repos)
        assert repos[0].license_name == "MIT License"
        assert repos[1].fork is True
        assert repos[1].topics == []
        params = route.calls.last.request.url.params
        assert params["per_page"] == "100"
        assert params["sort"] == "updated"
        assert params["direction"] == "desc"

    @respx.mock
    async def test_limit_truncates(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/repos").mock(
            return_value=httpx.Response(
                200, json=[_repo_payload(f"r{i}") for i in range(5)]
            )
        )

        async with _make_client() as client:
            repos = await client.fetch_repositories("testuser", limit=3)

        assert len(repos) == 3
        assert route.calls.last.request.url.params["per_page"] == "3"

    @respx.mock
    async def test_default_limit_from_config(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/repos").mock(
            return_value=httpx.Response(200, json=[])
        )
        config = DevBadgeConfig(analyzer=AnalyzerConfig(max_repos=25))

        async with _make_client(config=config) as client:
            assert await client.fetch_repositories("testuser") == []

        assert route.calls.last.request.url.params["per_page"] == "25"

    @respx.mock
    async def test_non_list_body_not_cached(self, tmp_path: Path) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/repos").mock(
            return_value=httpx.Response(200, json={"message": "odd"})
        )
        cache = Cache(db_path=tmp_path / "cache.db")

        async with _make_client(cache=cache) as client:
            with pytest.raises(GitHubAPIError, match="list of repositories"):
                await client.fetch_repositories("testuser")

        assert route.call_count == 1
        assert cache.stats()["total_entries"] == 0
        cache.close()

    @respx.mock
    async def test_cache_is_keyed_by_page_size(self, tmp_path: Path) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/repos").mock(
            side_effect=[
                httpx.Response(200, json=[_repo_payload(f"r{i}") for i in range(5)]),
                httpx.Response(200, json=[_repo_payload(f"r{i}") for i in range(8)]),
            ]
        )
        cache = Cache(db_path=tmp_path / "cache.db")

        async with _make_client(cache=cache) as client:
            small = await client.fetch_repositories("testuser", limit=5)
            full = await client.fetch_repositories("testuser", limit=100)
            small_again = await client.fetch_repositories("testuser", limit=5)

        assert len(small) == 5
        assert len(full) == 8
        assert len(small_again) == 5
        assert route.call_count == 2
        cache.close()

    @respx.mock
    async def test_unknown_user(self) -> None:
        respx.get(f"{BASE_URL}/users/ghost/repos").mock(
            return_value=httpx.Response(404, json={"message": "Not Found"})
        )

        async with _make_client() as client:
            with pytest.raises(UserNotFoundError):
                await client.fetch_repositories("ghost")


class TestFetchEvents:
    @respx.mock
    async def test_fetch_events(self) -> None:
        route = respx.get(f"{BASE_URL}/users/testuser/events/public").mock(
            return_value=httpx.Response(
                200,
                json=[
                    _event_payload(NOW - timedelta(days=1)),
                    _event_payload(NOW - timedelta(days=5)),
                ],
            )
        )

        async with _make_client() as client:
            events = await client.fetch_events("testuser", limit=50)

        assert len(events) == 2
        assert all(isinstance(event, ActivityEvent) for event in events)
        assert events[0].created_at == NOW - timedelta(days=1)
        assert route.calls.last.request.url.params["per_page"] == "50"


# ---------------------------------------------------------------------------
# fetch_profile_stats
# ---------------------------------------------------------------------------


class TestFetchProfileStats:
    @respx.mock
    async def test_profile_stats(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        respx.get(f"{BASE_URL}/users/testuser/events/public").mock(
            return_value=httpx.Response(
                200,
                json=[
                    _event_payload(NOW - timedelta(days=1)),
                    _event_payload(NOW - timedelta(days=1, hours=2)),
                    _event_payload(NOW - timedelta(days=4)),
                ],
            )
        )

        async with _make_client() as client:
            stats = await client.fetch_profile_stats("testuser", now=NOW)

        assert isinstance(stats, ProfileStats)
        assert stats.repo_count == 12
        assert stats.follower_count == 120
        assert stats.account_created_at == datetime(2018, 6, 1, tzinfo=UTC)
        assert stats.annual_active_days == 8

    @respx.mock
    async def test_event_failure_gives_zero_activity(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        respx.get(f"{BASE_URL}/users/testuser/events/public").mock(
            return_value=httpx.Response(500, json={"message": "Server Error"})
        )

        async with _make_client() as client:
            stats = await client.fetch_profile_stats("testuser", now=NOW)

        assert stats.annual_active_days == 0

    @respx.mock
    async def test_event_timeout_gives_zero_activity(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        respx.get(f"{BASE_URL}/users/testuser/events/public").mock(
            side_effect=httpx.ReadTimeout("slow")
        )

        async with _make_client() as client:
            stats = await client.fetch_profile_stats("testuser", now=NOW)

        assert stats.annual_active_days == 0
        assert stats.follower_count == 120

    @respx.mock
    async def test_html_event_body_gives_zero_activity(self) -> None:
        respx.get(f"{BASE_URL}/users/testuser").mock(
            return_value=httpx.Response(200, json=_user_payload())
        )
        respx.get(f"{BASE_URL}/users/testuser/events/public").mock(
            return_value=httpx.Response(200, text="<html>oops</html>")
        )

        async with _make_client() as client:
            stats = await client.fetch_profile_stats("testuser", now=NOW)

        assert stats.annual_active_days == 0

    @respx.mock
    async def test_missing_user_propagates(self) -> None:
        respx.get(f"{BASE_URL}/users/ghost").mock(
            return_value=httpx.Response(404, json={"message": "Not Found"})
        )

        async with _make_client() as client:
            with pytest.raises(UserNotFoundError):
                await client.fetch_profile_stats("ghost", now=NOW)
