"""Markdown renderer for ``template`` mode READMEs."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import FrozenSet, Optional

from impactboard.assets import svg_reference
from impactboard.config import Policy
from impactboard.fields import round_half_up
from impactboard.privacy import filter_opted_out
from impactboard.providers import PrivacyProvider, StatsProvider
from impactboard.ranks import fire_marks, rank_emoji
from impactboard.selection import rank_users
from impactboard.stats_data import AggregatedStats, AssetContext


def format_template_readme(
    org_login: str,
    stats: Sequence[AggregatedStats],
    opted_out_ids: Collection[int],
    policy: Policy,
    asset_context: Optional[AssetContext] = None,
) -> str:
    """Render the generated README for an org in ``template`` mode.

    Args:
        org_login: Organization login used in the heading.
        stats: Users for the template window, in provider order.
        opted_out_ids: Users who must not appear.
        policy: Policy carrying the template options.
        asset_context: Written assets; the leaderboard image is linked when
            present.

    Returns:
        The full Markdown document as a single string.
    """
    lines: list[str] = []
    lines.append(f"# {org_login} ImpactBoard")
    lines.append("")

    public = rank_users(filter_opted_out(stats, opted_out_ids))
    if policy.show_leaderboard and public:
        lines.append("## Leaderboard")
        lines.append("")

        image_path = asset_context.get("leaderboard") if asset_context else None
        if image_path:
            url = svg_reference(asset_context, image_path)
            lines.append(f"![{org_login} leaderboard]({url})")
            lines.append("")

        lines.append("| # | | Contributor | Tier | Impact | Streak |")
        lines.append("|---|---|---|---|---|---|")
        for position, s in enumerate(public[:policy.leaderboard_limit], start=1):
            lines.append(_render_row(position, s, policy.hidden_fields(s.user_login)))
        lines.append("")

    lines.append(f"_Window: {policy.template_window}_")
    return "\n".join(lines)


def _render_row(position: int, s: AggregatedStats, hidden: FrozenSet[str]) -> str:
    """Render one leaderboard table row; cells for hidden fields show ``-``."""
    if "rank" in hidden:
        emoji, tier = "", "-"
    else:
        emoji, tier = rank_emoji(s.rank), s.rank
    impact = "-" if "impact" in hidden else round_half_up(s.weighted_score)
    if "streak" in hidden or not s.current_streak:
        streak = "-"
    else:
        streak = f"{s.current_streak}{fire_marks(s.current_streak)}"
    return f"| {position} | {emoji} | @{s.user_login} | {tier} | {impact} | {streak} |"


async def render_template_readme(
    org_id: int,
    org_login: str,
    policy: Policy,
    stats_provider: StatsProvider,
    privacy_provider: PrivacyProvider,
    asset_context: Optional[AssetContext] = None,
) -> str:
    """Fetch the template window's statistics and render the README."""
    opted_out = await privacy_provider.get_opted_out_user_ids(org_id)
    stats = await stats_provider.get_org_stats(org_id, policy.template_window)
    return format_template_readme(org_login, stats, opted_out, policy, asset_context)
