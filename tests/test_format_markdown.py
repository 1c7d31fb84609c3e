"""Tests for the template mode README renderer.

Run with: python3 -m pytest tests/test_format_markdown.py -v
"""

from types import MappingProxyType

import pytest

from impactboard.config import Policy
from impactboard.format_markdown import format_template_readme, render_template_readme
from impactboard.stats_data import AssetContext

from conftest import make_user


class TestFormatTemplateReadme:

    def test_leaderboard_table(self, users):
        output = format_template_readme("acme", users, set(), Policy(mode="template"))
        lines = output.split("\n")
        assert lines[0] == "# acme ImpactBoard"
        assert "## Leaderboard" in lines
        assert "| 1 | \U0001f48e | @carol | Diamond | 2400 | 31\U0001f525\U0001f525\U0001f525 |" in lines
        assert "| 2 | \U0001f947 | @alice | Gold | 900 | 5\U0001f525 |" in lines
        assert "| 3 | \U0001f948 | @bob | Silver | 450 | 20\U0001f525\U0001f525 |" in lines
        assert "| 4 | \U0001f949 | @dave | Bronze | 50 | - |" in lines
        assert lines[-1] == "_Window: 30d_"

    def test_opted_out_users_excluded_without_gaps(self, users):
        output = format_template_readme("acme", users, {3}, Policy(mode="template"))
        assert "carol" not in output
        assert "| 1 | \U0001f947 | @alice |" in output
        assert "| 3 | \U0001f949 | @dave |" in output
        assert "| 4 |" not in output

    def test_leaderboard_limit(self, users):
        policy = Policy(mode="template", leaderboard_limit=2)
        output = format_template_readme("acme", users, set(), policy)
        assert "@alice" in output
        assert "@bob" not in output

    def test_leaderboard_hidden_by_option(self, users):
        policy = Policy(mode="template", show_leaderboard=False)
        output = format_template_readme("acme", users, set(), policy)
        assert "## Leaderboard" not in output
        assert "@carol" not in output

    def test_no_public_users(self, users):
        output = format_template_readme("acme", users, {1, 2, 3, 4}, Policy(mode="template"))
        assert output == "# acme ImpactBoard\n\n_Window: 30d_"

    def test_leaderboard_image(self, users):
        ctx = AssetContext("acme", {"leaderboard": "assets/impactboard/leaderboard.svg"})
        output = format_template_readme("acme", users, set(), Policy(mode="template"), ctx)
        assert (
            "![acme leaderboard](https://raw.githubusercontent.com/acme/.github/HEAD/"
            "assets/impactboard/leaderboard.svg)"
        ) in output

    def test_hidden_fields_render_as_dash(self):
        bob = make_user(2, "bob", 600.0, rank="Gold", current_streak=42)
        policy = Policy(
            mode="template",
            public_users=MappingProxyType({"bob": frozenset({"rank", "streak"})}),
        )
        output = format_template_readme("acme", [bob], set(), policy)
        assert "| 1 |  | @bob | - | 600 | - |" in output.split("\n")
        assert "Gold" not in output
        assert "42" not in output

    def test_hidden_impact_renders_as_dash(self, users):
        policy = Policy(
            mode="template",
            public_users=MappingProxyType({"alice": frozenset({"impact"})}),
        )
        output = format_template_readme("acme", users, set(), policy)
        assert "| 2 | \U0001f947 | @alice | Gold | - | 5\U0001f525 |" in output.split("\n")
        assert "| 3 | \U0001f948 | @bob | Silver | 450 |" in output


class TestRenderTemplateReadme:

    @pytest.mark.asyncio
    async def test_fetches_template_window(self, stats_provider, privacy_provider):
        policy = Policy(mode="template", template_window="90d")
        output = await render_template_readme(1, "acme", policy, stats_provider, privacy_provider)
        stats_provider.get_org_stats.assert_awaited_once_with(1, "90d")
        privacy_provider.get_opted_out_user_ids.assert_awaited_once_with(1)
        assert "_Window: 90d_" in output
