"""Output formatting for badge scores and tier analyses."""

from __future__ import annotations

import click
from pydantic import BaseModel

from dev_badge.models import AITierAnalysis, EnhancedAnalysis, ScoreBreakdown, Tier
from dev_badge.scoring import get_badge_info

_TIER_COLORS: dict[Tier, str] = {
    Tier.BRONZE: "yellow",
    Tier.SILVER: "white",
    Tier.GOLD: "bright_yellow",
    Tier.DIAMOND: "cyan",
}

_SUB_SCORE_LABELS: dict[str, str] = {
    "code_quality": "Code Quality",
    "activity_level": "Activity Level",
    "community_impact": "Community Impact",
    "project_diversity": "Project Diversity",
}


def _styled_tier(tier: Tier) -> str:
    badge = get_badge_info(tier)
    label = click.style(tier.label, fg=_TIER_COLORS.get(tier, "white"), bold=True)
    return f"{badge.emoji} {label}"


def format_cli_output(analysis: AITierAnalysis, verbose: bool = False) -> str:
    """Format a tier analysis for terminal display with color."""
    score_styled = click.style(f"{analysis.overall_score}/100", bold=True)
    lines: list[str] = [
        f"Tier: {_styled_tier(analysis.tier)} ({score_styled})",
        f"User: {analysis.username}",
        f"Developer type: {analysis.developer_type_emoji} {analysis.developer_type}",
        f"Confidence: {analysis.confidence}%",
        "",
        analysis.reasoning,
    ]

    if verbose:
        lines.append("")
        lines.append("Sub-scores:")
        for field, label in _SUB_SCORE_LABELS.items():
            value = getattr(analysis.detailed_analysis, field)
            lines.append(f"  {label}: {value}/100")

        if analysis.languages:
            lines.append("")
            lines.append("Languages:")
            for lang in analysis.languages:
                lines.append(
                    f"  {lang.name}: {lang.percentage}% "
                    f"({lang.repo_count} repos, {lang.stars} stars)"
                )

        quality = analysis.project_quality
        lines.append("")
        lines.append(
            f"Project quality: {quality.quality_score}/100 | "
            f"Descriptions: {quality.has_description}% | "
            f"Topics: {quality.has_topics}% | "
            f"Licenses: {quality.has_license}% | "
            f"Avg stars: {quality.avg_stars}"
        )

        if analysis.expertise:
            lines.append("")
            lines.append(f"Expertise: {', '.join(analysis.expertise)}")

    lines.append("")
    lines.append("Strengths:")
    lines.extend(f"  + {item}" for item in analysis.strengths)
    lines.append("")
    lines.append("Improvements:")
    lines.extend(f"  - {item}" for item in analysis.improvements)

    return "\n".join(lines)


def format_badge_output(login: str, breakdown: ScoreBreakdown) -> str:
    """Format a deterministic badge score for terminal display."""
    total_styled = click.style(str(breakdown.total_score), bold=True)
    return "\n".join([
        f"Badge: {_styled_tier(breakdown.tier)} ({total_styled} points)",
        f"User: {login}",
        "",
        f"  Repositories: {breakdown.repo_score}",
        f"  Followers: {breakdown.follower_score}",
        f"  Account age: {breakdown.age_score}",
        f"  Activity: {breakdown.activity_score}",
    ])


def format_enhanced_output(enhanced: EnhancedAnalysis) -> str:
    """Format a merged badge/analysis recommendation."""
    analysis = enhanced.analysis
    source = "analysis" if enhanced.tier_source == "ai" else "badge score"
    return "\n".join([
        f"Recommended tier: {_styled_tier(enhanced.recommended_tier)} (from {source})",
        f"User: {analysis.username}",
        f"Badge tier: {enhanced.existing_tier.label} ({enhanced.existing_score} points)",
        f"Analysis tier: {analysis.tier.label} ({analysis.overall_score}/100, "
        f"{analysis.confidence}% confidence)",
    ])


def format_markdown_report(analysis: AITierAnalysis) -> str:
    """Format a tier analysis as a Markdown report."""
    badge = get_badge_info(analysis.tier)
    lines: list[str] = [
        f"## {badge.emoji} {analysis.username}: **{analysis.tier.label}** Tier",
        "",
        f"**Score:** {analysis.overall_score}/100 "
        f"(confidence {analysis.confidence}%)",
        "",
        f"**Developer type:** {analysis.developer_type_emoji} {analysis.developer_type}",
        "",
        analysis.reasoning,
        "",
        "### Score Breakdown",
        "",
        "| Component | Score |",
        "|-----------|-------|",
    ]
    for field, label in _SUB_SCORE_LABELS.items():
        lines.append(f"| {label} | {getattr(analysis.detailed_analysis, field)} |")
    lines.append("")

    if analysis.languages:
        lines.append("### Languages")
        lines.append("")
        lines.append("| Language | Share | Repos | Stars |")
        lines.append("|----------|-------|-------|-------|")
        for lang in analysis.languages:
            lines.append(
                f"| {lang.name} | {lang.percentage}% | {lang.repo_count} | {lang.stars} |"
            )
        lines.append("")

    lines.append("### Strengths")
    lines.append("")
    lines.extend(f"- {item}" for item in analysis.strengths)
    lines.append("")
    lines.append("### Suggested Improvements")
    lines.append("")
    lines.extend(f"- {item}" for item in analysis.improvements)
    lines.append("")

    return "\n".join(lines)


def format_json(result: BaseModel) -> str:
    """Format any result model as JSON."""
    return result.model_dump_json(indent=2)
