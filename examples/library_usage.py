"""Example: Score and analyze a GitHub user with Dev Badge."""

from __future__ import annotations

import asyncio
import os

from dev_badge import analyze_github_user, merge_with_existing, score_github_user


async def main() -> None:
    token = os.environ.get("GITHUB_TOKEN")
    breakdown = await score_github_user("octocat", token=token)
    print(f"Badge: {breakdown.tier.label} ({breakdown.total_score} points)")

    analysis = await analyze_github_user("octocat", token=token)
    print(f"Analysis tier: {analysis.tier.label} ({analysis.overall_score}/100)")
    print(f"Developer type: {analysis.developer_type}")
    print(analysis.reasoning)

    enhanced = merge_with_existing(analysis, breakdown.tier, breakdown.total_score)
    print(f"Recommended: {enhanced.recommended_tier.label} ({enhanced.tier_source})")


if __name__ == "__main__":
    asyncio.run(main())
