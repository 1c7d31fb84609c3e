"""Privacy filter applied to statistics before any ranking or selection."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from impactboard.stats_data import AggregatedStats


def filter_opted_out(
    stats: Sequence[AggregatedStats],
    opted_out_ids: Collection[int],
) -> list[AggregatedStats]:
    """Drop opted-out users, keeping the relative order of everyone else.

    The result is a new list; the input is never modified. Callers rank the
    filtered list, so a removed user leaves no gap in positions.

    Args:
        stats: Per-user statistics in provider order.
        opted_out_ids: User ids from the authoritative privacy set.

    Returns:
        The public subset of ``stats``.
    """
    return [s for s in stats if s.user_id not in opted_out_ids]
