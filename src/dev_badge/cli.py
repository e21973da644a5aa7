"""Click-based CLI for Dev Badge."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any, NoReturn, TypeVar

import click
import httpx

from dev_badge.analyzer import analyze_github_user, merge_with_existing
from dev_badge.cache import Cache
from dev_badge.config import DevBadgeConfig, load_config
from dev_badge.exceptions import (
    ConfigError,
    DevBadgeError,
    RateLimitExhaustedError,
    UserNotFoundError,
)
from dev_badge.formatter import (
    format_badge_output,
    format_cli_output,
    format_enhanced_output,
    format_json,
    format_markdown_report,
)
from dev_badge.models import EnhancedAnalysis
from dev_badge.scoring import score_github_user

T = TypeVar("T")


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> DevBadgeConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        _fail(str(exc))


def _open_cache(config: DevBadgeConfig, no_cache: bool) -> Cache | None:
    if no_cache:
        return None
    return Cache(ttls=config.cache_ttl.to_seconds())


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro*, turning expected failures into CLI errors."""
    try:
        return asyncio.run(coro)
    except RateLimitExhaustedError as exc:
        _fail(
            f"GitHub rate limit exhausted. Resets at {exc.reset_at.isoformat()}. "
            "Set GITHUB_TOKEN for a higher limit."
        )
    except UserNotFoundError as exc:
        _fail(f"GitHub user not found: {exc.login}")
    except DevBadgeError as exc:
        _fail(str(exc))
    except httpx.HTTPError as exc:
        _fail(f"Could not reach GitHub: {exc}")


@click.group()
@click.version_option(package_name="dev-badge")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Dev Badge - GitHub profile scoring and tier analysis."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


@main.command()
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--markdown", "output_markdown", is_flag=True, help="Output as Markdown")
@click.option("--refresh", is_flag=True, help="Ignore any remembered analysis")
@click.option("--no-cache", is_flag=True, help="Do not read or write the cache")
def analyze(
    username: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
    output_markdown: bool,
    refresh: bool,
    no_cache: bool,
) -> None:
    """Analyze a GitHub profile and classify it into a tier."""
    config = _load_config(config_path)
    cache = _open_cache(config, no_cache)
    try:
        result = _run(
            analyze_github_user(
                username,
                config=config,
                token=token or None,
                cache=cache,
                refresh=refresh,
            )
        )
    finally:
        if cache is not None:
            cache.close()

    if output_json:
        click.echo(format_json(result))
    elif output_markdown:
        click.echo(format_markdown_report(result))
    else:
        click.echo(format_cli_output(result, verbose=verbose))


@main.command()
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--no-cache", is_flag=True, help="Do not read or write the cache")
def badge(
    username: str,
    token: str | None,
    config_path: str | None,
    output_json: bool,
    no_cache: bool,
) -> None:
    """Compute the point-based developer badge for a GitHub user."""
    config = _load_config(config_path)
    cache = _open_cache(config, no_cache)
    try:
        result = _run(
            score_github_user(username, config=config, token=token or None, cache=cache)
        )
    finally:
        if cache is not None:
            cache.close()

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_badge_output(username, result))


async def _compare(
    username: str,
    config: DevBadgeConfig,
    token: str | None,
    cache: Cache | None,
) -> EnhancedAnalysis:
    breakdown = await score_github_user(username, config=config, token=token, cache=cache)
    analysis = await analyze_github_user(
        username, config=config, token=token, cache=cache
    )
    return merge_with_existing(analysis, breakdown.tier, breakdown.total_score)


@main.command()
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--no-cache", is_flag=True, help="Do not read or write the cache")
def compare(
    username: str,
    token: str | None,
    config_path: str | None,
    output_json: bool,
    no_cache: bool,
) -> None:
    """Run both scorers and recommend the higher-ranked tier."""
    config = _load_config(config_path)
    cache = _open_cache(config, no_cache)
    try:
        result = _run(_compare(username, config, token or None, cache))
    finally:
        if cache is not None:
            cache.close()

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_enhanced_output(result))


@main.command("cache-stats")
def cache_stats() -> None:
    """Show cache statistics."""
    cache = Cache()
    stats = cache.stats()
    click.echo(f"Total entries: {stats['total_entries']}")
    click.echo(f"Active entries: {stats['active_entries']}")
    click.echo(f"Expired entries: {stats['expired_entries']}")
    click.echo(f"Database size: {stats['db_size_bytes']:,} bytes")
    if stats["categories"]:
        click.echo("\nBy category:")
        for cat, count in stats["categories"].items():
            click.echo(f"  {cat}: {count}")
    cache.close()


@main.command("cache-clear")
@click.option("--category", default=None, help="Clear specific category only")
def cache_clear(category: str | None) -> None:
    """Clear the cache."""
    cache = Cache()
    if category:
        cache.invalidate_category(category)
        click.echo(f"Cleared cache category: {category}")
    else:
        removed = cache.cleanup_expired()
        click.echo(f"Removed {removed} expired entries")
    cache.close()
