"""Heuristic tier analysis of a GitHub profile."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError

from dev_badge.cache import Cache, KeyValueStore
from dev_badge.config import DevBadgeConfig, load_config
from dev_badge.exceptions import AnalysisFailedError
from dev_badge.insights import (
    analyze_languages,
    analyze_project_quality,
    detect_developer_type,
    identify_expertise,
)
from dev_badge.metrics import compute_scores, derive_metrics, determine_tier, own_repositories
from dev_badge.models import (
    ActivityEvent,
    AITierAnalysis,
    EnhancedAnalysis,
    GitHubUser,
    RawRepository,
    Tier,
)
from dev_badge.narrative import (
    NarrativeContext,
    generate_reasoning,
    identify_strengths,
    suggest_improvements,
)

logger = logging.getLogger(__name__)


class ProfileProvider(Protocol):
    """Source of GitHub profile data, usually :class:`GitHubClient`."""

    async def fetch_user(self, login: str) -> GitHubUser: ...

    async def fetch_repositories(
        self, login: str, limit: int | None = None
    ) -> list[RawRepository]: ...

    async def fetch_events(
        self, login: str, limit: int | None = None
    ) -> list[ActivityEvent]: ...


class TierAnalyzer:
    """Classify GitHub profiles into tiers from fetched profile data.

    The analyzer keeps no per-analysis state, so one instance may run
    several analyses concurrently.
    """

    def __init__(
        self, client: ProfileProvider, config: DevBadgeConfig | None = None
    ) -> None:
        self._client = client
        self.config = config if config is not None else DevBadgeConfig()

    async def analyze_profile(self, username: str) -> AITierAnalysis:
        """Fetch *username*'s data and analyze it.

        Raises:
            AnalysisFailedError: If the user record or repository list
                cannot be fetched. Event history is best-effort. A failed
                fetch cancels the others.
        """
        analyzer_cfg = self.config.analyzer
        try:
            async with asyncio.TaskGroup() as tg:
                user_task = tg.create_task(self._client.fetch_user(username))
                repos_task = tg.create_task(
                    self._client.fetch_repositories(username, analyzer_cfg.max_repos)
                )
                events_task = tg.create_task(self._fetch_events_safely(username))
        except ExceptionGroup as group:
            cause = group.exceptions[0]
            logger.error("Error in tier analysis for %s: %s", username, cause)
            raise AnalysisFailedError(username) from cause

        return self.build_analysis(
            username, user_task.result(), repos_task.result(), events_task.result()
        )

    async def _fetch_events_safely(self, username: str) -> list[ActivityEvent]:
        try:
            return await self._client.fetch_events(
                username, self.config.analyzer.max_events
            )
        except Exception as exc:
            logger.warning("Could not fetch events for %s: %s", username, exc)
            return []

    def build_analysis(
        self,
        username: str,
        user: GitHubUser,
        repos: Sequence[RawRepository],
        events: Sequence[ActivityEvent],
        now: datetime | None = None,
    ) -> AITierAnalysis:
        """Run the scoring pipeline over already-fetched data."""
        if now is None:
            now = datetime.now(UTC)
        own = own_repositories(repos)

        metrics = derive_metrics(
            user, repos, events,
            window_days=self.config.analyzer.recent_window_days,
            now=now,
        )
        scores = compute_scores(metrics)
        tier = determine_tier(scores.overall_score, self.config.analysis_thresholds)

        languages = analyze_languages(own)
        developer_type = detect_developer_type(languages)
        project_quality = analyze_project_quality(own)
        expertise = identify_expertise(languages, own)

        ctx = NarrativeContext(
            metrics=metrics,
            scores=scores,
            tier=tier,
            languages=languages,
            developer_type=developer_type,
            project_quality=project_quality,
        )

        logger.debug(
            "Analyzed %s: overall=%d tier=%s confidence=%d",
            username, scores.overall_score, tier.value, scores.confidence,
        )

        return AITierAnalysis(
            username=username,
            tier=tier,
            overall_score=scores.overall_score,
            confidence=scores.confidence,
            reasoning=generate_reasoning(ctx),
            strengths=identify_strengths(ctx),
            improvements=suggest_improvements(ctx),
            detailed_analysis=scores.detailed(),
            languages=languages,
            developer_type=developer_type.name,
            developer_type_emoji=developer_type.emoji,
            project_quality=project_quality,
            expertise=expertise,
            analyzed_at=now,
        )

    async def get_enhanced_analysis(
        self,
        username: str,
        existing_tier: Tier | str,
        existing_score: int = 0,
    ) -> EnhancedAnalysis:
        """Analyze *username* and merge with a previously computed badge tier."""
        analysis = await self.analyze_profile(username)
        return merge_with_existing(analysis, existing_tier, existing_score)


def merge_with_existing(
    analysis: AITierAnalysis,
    existing_tier: Tier | str,
    existing_score: int = 0,
) -> EnhancedAnalysis:
    """Recommend whichever tier ranks higher; ties keep the existing tier."""
    existing = Tier.parse(existing_tier)
    if analysis.tier.rank > existing.rank:
        recommended, source = analysis.tier, "ai"
    else:
        recommended, source = existing, "existing"
    return EnhancedAnalysis(
        analysis=analysis,
        existing_tier=existing,
        existing_score=existing_score,
        recommended_tier=recommended,
        tier_source=source,
    )


def _analysis_key(username: str) -> str:
    return f"analysis:{username.lower()}"


def recall_analysis(store: KeyValueStore, username: str) -> AITierAnalysis | None:
    """Return the remembered analysis for *username*, if any."""
    cached = store.get(_analysis_key(username))
    if cached is None:
        return None
    try:
        return AITierAnalysis.model_validate(cached)
    except ValidationError:
        logger.warning("Discarding unreadable cached analysis for %s", username)
        return None


def remember_analysis(store: KeyValueStore, analysis: AITierAnalysis) -> None:
    store.set(
        _analysis_key(analysis.username),
        analysis.model_dump(mode="json"),
        "analysis",
    )


async def analyze_github_user(
    username: str,
    config: DevBadgeConfig | None = None,
    token: str | None = None,
    cache: Cache | None = None,
    refresh: bool = False,
) -> AITierAnalysis:
    """Convenience function: fetch data and analyze a GitHub user.

    Parameters
    ----------
    username:
        GitHub login to analyze.
    config:
        Optional configuration; defaults are loaded when *None*.
    token:
        GitHub token; falls back to the ``GITHUB_TOKEN`` env var.
    cache:
        Optional :class:`~dev_badge.cache.Cache`. It caches API responses
        and remembers the last analysis per user.
    refresh:
        Ignore a remembered analysis and analyze again.
    """
    from dev_badge.github_client import GitHubClient

    if config is None:
        config = load_config()

    if token is None:
        token = os.environ.get("GITHUB_TOKEN") or None

    if cache is not None and not refresh:
        remembered = recall_analysis(cache, username)
        if remembered is not None:
            logger.info("Using remembered analysis for %s", username)
            return remembered

    client_cache = None if refresh else cache
    async with GitHubClient(token=token, config=config, cache=client_cache) as client:
        analysis = await TierAnalyzer(client, config).analyze_profile(username)

    if cache is not None:
        remember_analysis(cache, analysis)
    return analysis
