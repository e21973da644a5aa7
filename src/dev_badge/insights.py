"""Language mix, developer archetype, project quality and expertise."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from dev_badge.metrics import round_half_up
from dev_badge.models import DeveloperType, LanguageBreakdown, ProjectQuality, RawRepository

MAX_LANGUAGES = 8
TOP_LANGUAGES_FOR_TYPE = 5
MAX_TOPICS = 5
MAX_EXPERTISE = 10


# Checked in order; the first archetype with two or more matches wins.
ARCHETYPES: dict[str, tuple[str, frozenset[str]]] = {
    "Blockchain Developer": ("\u26d3\ufe0f", frozenset({"Move", "Solidity", "Rust"})),
    "Frontend Developer": (
        "\U0001f3a8", frozenset({"JavaScript", "TypeScript", "Vue", "CSS", "HTML"})
    ),
    "Backend Developer": (
        "\u2699\ufe0f", frozenset({"Python", "Java", "Go", "C#", "PHP", "Ruby"})
    ),
    "Mobile Developer": ("\U0001f4f1", frozenset({"Swift", "Kotlin", "Dart", "Objective-C"})),
    "Data Scientist": ("\U0001f4ca", frozenset({"Python", "R", "Jupyter Notebook"})),
    "DevOps Engineer": ("\U0001f527", frozenset({"Shell", "Dockerfile", "HCL"})),
    "Systems Programmer": ("\U0001f4bb", frozenset({"C", "C++", "Assembly", "Rust"})),
}

FULL_STACK = DeveloperType(name="Full-Stack Developer", emoji="\U0001f680")
ASPIRING = DeveloperType(name="Aspiring Developer", emoji="\U0001f331")
GENERALIST = DeveloperType(name="Software Developer", emoji="\U0001f4bb")

_FULL_STACK_FRONTEND = frozenset({"JavaScript", "TypeScript", "Vue", "CSS"})
_FULL_STACK_BACKEND = frozenset({"Python", "Java", "Go", "Ruby", "PHP", "C#"})
_TOP_LANGUAGE_FRONTEND = frozenset({"JavaScript", "TypeScript", "CSS", "HTML", "Vue"})
_TOP_LANGUAGE_BACKEND = frozenset({"Python", "Java", "Go", "Ruby", "PHP"})


def analyze_languages(repos: Sequence[RawRepository]) -> list[LanguageBreakdown]:
    """Group repositories by primary language, most common first.

    Percentages are relative to all given repositories, including those
    without a detected language, so they may sum to less than 100.
    """
    counts: dict[str, int] = {}
    stars: dict[str, int] = {}
    for repo in repos:
        if not repo.language:
            continue
        counts[repo.language] = counts.get(repo.language, 0) + 1
        stars[repo.language] = stars.get(repo.language, 0) + repo.stargazers_count

    total = len(repos) or 1
    breakdown = [
        LanguageBreakdown(
            name=name,
            percentage=round_half_up(count / total * 100),
            repo_count=count,
            stars=stars[name],
        )
        for name, count in counts.items()
    ]
    breakdown.sort(key=lambda lang: lang.percentage, reverse=True)
    return breakdown[:MAX_LANGUAGES]


def detect_developer_type(languages: Sequence[LanguageBreakdown]) -> DeveloperType:
    """Classify a developer from their ranked language breakdown."""
    if not languages:
        return ASPIRING

    top = [lang.name for lang in languages[:TOP_LANGUAGES_FOR_TYPE]]

    for name, (emoji, archetype_languages) in ARCHETYPES.items():
        matches = sum(1 for lang in top if lang in archetype_languages)
        if matches >= 2:
            return DeveloperType(name=name, emoji=emoji)

    has_frontend = any(name in _FULL_STACK_FRONTEND for name in top)
    has_backend = any(name in _FULL_STACK_BACKEND for name in top)
    if has_frontend and has_backend:
        return FULL_STACK

    top_language = languages[0].name
    if top_language in _TOP_LANGUAGE_FRONTEND:
        return DeveloperType(name="Frontend Developer", emoji="\U0001f3a8")
    if top_language in _TOP_LANGUAGE_BACKEND:
        return DeveloperType(name="Backend Developer", emoji="\u2699\ufe0f")
    return GENERALIST


def analyze_project_quality(repos: Sequence[RawRepository]) -> ProjectQuality:
    """Score documentation, tagging, licensing and popularity of *repos*."""
    total = len(repos) or 1
    with_readme = sum(1 for repo in repos if repo.description or repo.has_wiki)
    with_description = sum(1 for repo in repos if repo.description)
    with_topics = sum(1 for repo in repos if repo.topics)
    with_license = sum(1 for repo in repos if repo.license_name)
    total_stars = sum(repo.stargazers_count for repo in repos)

    quality_score = round_half_up(
        with_description / total * 30
        + with_topics / total * 25
        + with_license / total * 20
        + min(total_stars / total / 10 * 25, 25)
    )

    return ProjectQuality(
        has_readme=round_half_up(with_readme / total * 100),
        has_description=round_half_up(with_description / total * 100),
        has_topics=round_half_up(with_topics / total * 100),
        has_license=round_half_up(with_license / total * 100),
        avg_stars=round_half_up(total_stars / total * 10) / 10,
        quality_score=min(quality_score, 100),
    )


def identify_expertise(
    languages: Sequence[LanguageBreakdown], repos: Sequence[RawRepository]
) -> list[str]:
    """List strong languages, then recurring repository topics."""
    expertise = [
        f"{lang.name} ({lang.repo_count} projects, {lang.stars}\u2b50)"
        for lang in languages
        if lang.repo_count >= 3 or lang.stars >= 10
    ]

    topic_counts: Counter[str] = Counter()
    for repo in repos:
        topic_counts.update(repo.topics)
    # most_common keeps first-seen order among equal counts
    strong_topics = [
        topic for topic, count in topic_counts.most_common() if count >= 2
    ][:MAX_TOPICS]
    expertise.extend(f"#{topic}" for topic in strong_topics)

    return expertise[:MAX_EXPERTISE]
