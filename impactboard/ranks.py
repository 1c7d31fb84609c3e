"""Contributor rank tiers and their display decorations."""

from __future__ import annotations

# Minimum weighted score for each tier, highest first
RANK_THRESHOLDS: list[tuple[str, float]] = [
    ("Diamond", 2000),
    ("Gold", 500),
    ("Silver", 100),
    ("Bronze", 0),
]

RANK_EMOJI = {
    "Bronze": "\U0001f949",
    "Silver": "\U0001f948",
    "Gold": "\U0001f947",
    "Diamond": "\U0001f48e",
}

FIRE = "\U0001f525"


def calculate_rank(weighted_score: float) -> str:
    """Return the tier name for a weighted score."""
    for name, threshold in RANK_THRESHOLDS:
        if weighted_score >= threshold:
            return name
    return "Bronze"


def rank_emoji(rank: str) -> str:
    """Return the tier emoji, or an empty string for unknown tiers."""
    return RANK_EMOJI.get(rank, "")


def fire_marks(streak: int) -> str:
    """Flames for a streak length: one below 14 days, two from 14, three from 30."""
    if streak >= 30:
        return FIRE * 3
    if streak >= 14:
        return FIRE * 2
    return FIRE
