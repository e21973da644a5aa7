"""Async GitHub REST client for fetching profile, repository and event data."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from dev_badge.cache import Cache
from dev_badge.config import DevBadgeConfig, load_config
from dev_badge.exceptions import GitHubAPIError, RateLimitExhaustedError, UserNotFoundError
from dev_badge.models import ActivityEvent, GitHubUser, ProfileStats, RawRepository
from dev_badge.scoring import estimate_active_days

logger = logging.getLogger(__name__)

_MAX_PER_PAGE = 100

# Event history is best-effort; these mean it could not be obtained.
_EVENT_FETCH_ERRORS = (GitHubAPIError, httpx.HTTPError, ValidationError)


class GitHubClient:
    """Async GitHub REST client.

    A token is optional; anonymous requests work against public data at a
    much lower rate limit.
    """

    def __init__(
        self,
        token: str | None = None,
        config: DevBadgeConfig | None = None,
        cache: Cache | None = None,
    ) -> None:
        self._token = token
        self._config = config if config is not None else load_config()
        self._cache = cache
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self._config.fetch.base_url,
            headers=headers,
            timeout=self._config.fetch.timeout_seconds,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        params: dict[str, object] | None = None,
        login: str | None = None,
    ) -> Any:
        """GET a REST resource with error and rate-limit handling.

        Raises:
            UserNotFoundError: On 404 when *login* identifies the subject.
            RateLimitExhaustedError: On 403 with a rate-limit message or on 429.
            GitHubAPIError: For any other non-2xx response or a body that
                is not JSON.
        """
        logger.debug("GET %s %s", path, params or {})
        response = await self._client.get(path, params=params)

        if response.status_code in (403, 429):
            body = _json_or_none(response) or {}
            message = body.get("message", "") if isinstance(body, dict) else ""
            if response.status_code == 429 or "rate limit" in message.lower():
                reset_header = response.headers.get("X-RateLimit-Reset")
                if reset_header:
                    reset_at = datetime.fromtimestamp(int(reset_header), tz=UTC)
                else:
                    reset_at = datetime.now(UTC)
                raise RateLimitExhaustedError(reset_at=reset_at)

        if response.status_code == 404 and login is not None:
            raise UserNotFoundError(login=login)

        if not response.is_success:
            remaining = response.headers.get("X-RateLimit-Remaining")
            raise GitHubAPIError(
                message=f"GitHub API returned {response.status_code} for {path}",
                status_code=response.status_code,
                rate_limit_remaining=int(remaining) if remaining else None,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                message=f"GitHub API returned a non-JSON body for {path}",
                status_code=response.status_code,
            ) from exc

    async def _cached_get(
        self,
        cache_key: str,
        category: str,
        path: str,
        params: dict[str, object] | None = None,
        login: str | None = None,
        expect_list: bool = False,
    ) -> Any:
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_key)
                return cached
        payload = await self._get(path, params=params, login=login)
        if expect_list:
            _expect_list(payload, category)
        if self._cache is not None:
            self._cache.set(cache_key, payload, category)
        return payload

    async def fetch_user(self, login: str) -> GitHubUser:
        """Fetch a public user record (``GET /users/{login}``)."""
        payload = await self._cached_get(
            f"user_profile:{login}", "user_profile", f"/users/{login}", login=login
        )
        return GitHubUser.model_validate(payload)

    async def fetch_authenticated_user(self) -> GitHubUser:
        """Fetch the user owning the configured token (``GET /user``)."""
        if not self._token:
            raise GitHubAPIError("A token is required to fetch the authenticated user", 401)
        payload = await self._get("/user")
        return GitHubUser.model_validate(payload)

    async def fetch_repositories(
        self, login: str, limit: int | None = None
    ) -> list[RawRepository]:
        """Fetch up to *limit* repositories, most recently updated first."""
        if limit is None:
            limit = self._config.analyzer.max_repos
        per_page = min(limit, _MAX_PER_PAGE)
        params: dict[str, object] = {
            "per_page": per_page,
            "sort": "updated",
            "direction": "desc",
        }
        payload = await self._cached_get(
            f"repositories:{login}:{per_page}",
            "repositories",
            f"/users/{login}/repos",
            params=params,
            login=login,
            expect_list=True,
        )
        return [RawRepository.model_validate(item) for item in payload[:limit]]

    async def fetch_events(
        self, login: str, limit: int | None = None
    ) -> list[ActivityEvent]:
        """Fetch up to *limit* public events, newest first.

        GitHub only retains roughly the last 90 days of public events.
        """
        if limit is None:
            limit = self._config.analyzer.max_events
        per_page = min(limit, _MAX_PER_PAGE)
        payload = await self._cached_get(
            f"events:{login}:{per_page}",
            "events",
            f"/users/{login}/events/public",
            params={"per_page": per_page},
            login=login,
            expect_list=True,
        )
        return [ActivityEvent.model_validate(item) for item in payload[:limit]]

    async def fetch_profile_stats(
        self, login: str, now: datetime | None = None
    ) -> ProfileStats:
        """Build :class:`ProfileStats` for the deterministic calculator.

        Annual active days are estimated from public events; if the event
        history cannot be fetched the estimate is zero.
        """
        user = await self.fetch_user(login)
        try:
            events = await self.fetch_events(login)
        except _EVENT_FETCH_ERRORS as exc:
            logger.warning("Could not fetch events for %s: %s", login, exc)
            events = []
        return ProfileStats(
            repo_count=user.public_repos,
            follower_count=user.followers,
            account_created_at=user.created_at,
            annual_active_days=estimate_active_days(events, now=now),
        )


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _expect_list(payload: Any, what: str) -> None:
    if not isinstance(payload, list):
        raise GitHubAPIError(
            f"Expected a list of {what}, got {type(payload).__name__}"
        )
