"""Dev Badge - GitHub profile scoring and tier analysis."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from dev_badge.analyzer import TierAnalyzer, analyze_github_user, merge_with_existing
from dev_badge.config import DevBadgeConfig
from dev_badge.exceptions import AnalysisFailedError, DevBadgeError
from dev_badge.models import AITierAnalysis, ProfileStats, ScoreBreakdown, Tier
from dev_badge.scoring import calculate_github_score, score_github_user

try:
    __version__ = version("dev-badge")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AITierAnalysis",
    "AnalysisFailedError",
    "DevBadgeConfig",
    "DevBadgeError",
    "ProfileStats",
    "ScoreBreakdown",
    "Tier",
    "TierAnalyzer",
    "__version__",
    "analyze_github_user",
    "calculate_github_score",
    "merge_with_existing",
    "score_github_user",
]
