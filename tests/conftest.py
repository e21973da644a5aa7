"""Shared test fixtures for Dev Badge tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from dev_badge.models import ActivityEvent, GitHubUser, RawRepository

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def make_repo(name: str, **overrides: object) -> RawRepository:
    data: dict[str, object] = {
        "name": name,
        "description": None,
        "language": None,
        "stargazers_count": 0,
        "forks_count": 0,
        "topics": [],
        "license": None,
        "has_wiki": False,
        "fork": False,
    }
    data.update(overrides)
    return RawRepository.model_validate(data)


def make_event(days_ago: float, now: datetime = NOW) -> ActivityEvent:
    return ActivityEvent(
        id=f"evt-{days_ago}",
        type="PushEvent",
        created_at=now - timedelta(days=days_ago),
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def repo_factory() -> Callable[..., RawRepository]:
    return make_repo


@pytest.fixture
def event_factory() -> Callable[..., ActivityEvent]:
    return make_event


@pytest.fixture
def sample_user() -> GitHubUser:
    return GitHubUser(
        login="testuser",
        name="Test User",
        created_at=datetime(2018, 6, 1, tzinfo=UTC),
        followers=120,
        following=30,
        public_repos=12,
        public_gists=4,
    )


@pytest.fixture
def new_user() -> GitHubUser:
    return GitHubUser(
        login="newbie",
        created_at=NOW - timedelta(days=10),
    )


@pytest.fixture
def sample_repos() -> list[RawRepository]:
    return [
        make_repo(
            "move-dex",
            description="A DEX written in Move",
            language="Move",
            stargazers_count=40,
            forks_count=6,
            topics=["sui", "defi"],
            license={"key": "mit", "name": "MIT License"},
        ),
        make_repo(
            "sui-wallet",
            description="Wallet tooling",
            language="Rust",
            stargazers_count=25,
            forks_count=3,
            topics=["sui", "wallet"],
            license={"key": "apache-2.0", "name": "Apache License 2.0"},
        ),
        make_repo(
            "web-app",
            description="Frontend for the DEX",
            language="TypeScript",
            stargazers_count=5,
            forks_count=1,
            topics=["defi"],
        ),
        make_repo("scratch", language="TypeScript"),
        make_repo(
            "forked-lib",
            description="Someone else's library",
            language="Go",
            stargazers_count=900,
            forks_count=300,
            fork=True,
        ),
    ]


@pytest.fixture
def sample_events() -> list[ActivityEvent]:
    return [make_event(days) for days in (1, 2, 2.5, 10, 45, 89, 91, 200)]
