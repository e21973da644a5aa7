"""Rule tables that turn scores and metrics into reasoning text.

Each table is an ordered sequence of ``(predicate, message)`` rules.
Rules are evaluated in order and every rule whose predicate holds
contributes exactly one line, so output is deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from dev_badge.models import (
    AIScores,
    DerivedMetrics,
    DeveloperType,
    LanguageBreakdown,
    ProjectQuality,
    Tier,
)


class NarrativeContext(BaseModel):
    """Everything the narrative rules may look at."""
    model_config = ConfigDict(frozen=True)

    metrics: DerivedMetrics
    scores: AIScores
    tier: Tier
    languages: list[LanguageBreakdown] = []
    developer_type: DeveloperType
    project_quality: ProjectQuality

    @property
    def top_language_names(self) -> str:
        return ", ".join(lang.name for lang in self.languages[:3])


class NarrativeRule(NamedTuple):
    predicate: Callable[[NarrativeContext], bool]
    message: Callable[[NarrativeContext], str]


def _always(ctx: NarrativeContext) -> bool:
    return True


def _tier_is(tier: Tier) -> Callable[[NarrativeContext], bool]:
    return lambda ctx: ctx.tier == tier


REASONING_RULES: tuple[NarrativeRule, ...] = (
    NarrativeRule(
        _always,
        lambda ctx: (
            f"{ctx.developer_type.emoji} {ctx.developer_type.name} with "
            f"{ctx.metrics.own_repos} repositories and "
            f"{ctx.metrics.total_stars} total stars."
        ),
    ),
    NarrativeRule(
        _always,
        lambda ctx: f"Primary expertise in {ctx.top_language_names or 'various languages'}.",
    ),
    NarrativeRule(
        _tier_is(Tier.DIAMOND),
        lambda ctx: (
            "Exceptional developer demonstrating outstanding code quality, "
            "active contributions, and significant community impact. "
            "Highly recommended for senior roles."
        ),
    ),
    NarrativeRule(
        _tier_is(Tier.GOLD),
        lambda ctx: (
            "Strong developer with quality projects and established community "
            "presence. Suitable for mid to senior level positions."
        ),
    ),
    NarrativeRule(
        _tier_is(Tier.SILVER),
        lambda ctx: (
            "Developing developer showing promising skills and consistent growth. "
            "Great potential for junior to mid-level roles."
        ),
    ),
    NarrativeRule(
        _tier_is(Tier.BRONZE),
        lambda ctx: (
            "Beginner developer building their portfolio. "
            "Recommended for internships and entry-level positions."
        ),
    ),
)

STRENGTH_RULES: tuple[NarrativeRule, ...] = (
    NarrativeRule(
        _always,
        lambda ctx: f"{ctx.developer_type.emoji} {ctx.developer_type.name}",
    ),
    NarrativeRule(
        lambda ctx: bool(ctx.languages),
        lambda ctx: f"\U0001f4bb Proficient in {ctx.top_language_names}",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.code_quality > 70,
        lambda ctx: f"\u2728 High code quality ({ctx.scores.code_quality}/100)",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.activity_level > 70,
        lambda ctx: f"\u26a1 Very active contributor ({ctx.scores.activity_level}/100)",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.community_impact > 70,
        lambda ctx: f"\U0001f31f Strong community presence ({ctx.scores.community_impact}/100)",
    ),
    NarrativeRule(
        lambda ctx: ctx.project_quality.quality_score > 70,
        lambda ctx: (
            f"\U0001f4e6 Well-documented projects "
            f"({ctx.project_quality.quality_score}% quality)"
        ),
    ),
    NarrativeRule(
        lambda ctx: ctx.metrics.total_stars > 100,
        lambda ctx: f"\u2b50 {ctx.metrics.total_stars} total stars earned",
    ),
    NarrativeRule(
        lambda ctx: ctx.metrics.followers > 50,
        lambda ctx: f"\U0001f465 {ctx.metrics.followers} GitHub followers",
    ),
    NarrativeRule(
        lambda ctx: len(ctx.languages) >= 5,
        lambda ctx: f"\U0001f3af Versatile - {len(ctx.languages)} programming languages",
    ),
)

IMPROVEMENT_RULES: tuple[NarrativeRule, ...] = (
    NarrativeRule(
        lambda ctx: ctx.project_quality.has_description < 70,
        lambda ctx: "Add detailed README files and descriptions to all repositories",
    ),
    NarrativeRule(
        lambda ctx: ctx.project_quality.has_topics < 50,
        lambda ctx: "Use topics/tags to categorize repositories for better discoverability",
    ),
    NarrativeRule(
        lambda ctx: ctx.project_quality.has_license < 50,
        lambda ctx: "Add licenses to projects to clarify usage rights",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.activity_level < 50,
        lambda ctx: "Increase contribution frequency and consistency",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.activity_level < 50,
        lambda ctx: "Participate in more open source projects",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.community_impact < 50,
        lambda ctx: "Create projects that solve real-world problems",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.community_impact < 50,
        lambda ctx: "Engage more with the developer community",
    ),
    NarrativeRule(
        lambda ctx: ctx.metrics.followers < 50,
        lambda ctx: "Build your developer network and following",
    ),
    NarrativeRule(
        lambda ctx: ctx.project_quality.avg_stars < 5,
        lambda ctx: "Focus on creating higher quality, more useful projects",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.project_diversity < 50,
        lambda ctx: "Explore different programming languages and technologies",
    ),
    NarrativeRule(
        lambda ctx: ctx.scores.project_diversity < 50,
        lambda ctx: "Diversify project types and domains",
    ),
)

GROWING_PROFILE = "\U0001f331 Growing developer profile"
KEEP_BUILDING = "Keep building quality projects and engaging with the community"


def apply_rules(rules: Sequence[NarrativeRule], ctx: NarrativeContext) -> list[str]:
    """Render every rule whose predicate holds, in table order."""
    return [rule.message(ctx) for rule in rules if rule.predicate(ctx)]


def generate_reasoning(ctx: NarrativeContext) -> str:
    return " ".join(apply_rules(REASONING_RULES, ctx))


def identify_strengths(ctx: NarrativeContext) -> list[str]:
    # The developer-type line always fires; alone it is not a strength.
    strengths = apply_rules(STRENGTH_RULES, ctx)
    return strengths if len(strengths) > 1 else [GROWING_PROFILE]


def suggest_improvements(ctx: NarrativeContext) -> list[str]:
    return apply_rules(IMPROVEMENT_RULES, ctx) or [KEEP_BUILDING]
