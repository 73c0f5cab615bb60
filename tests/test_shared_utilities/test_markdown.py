"""
Tests for Markdown building blocks.
"""

import pytest

from src.shared_utilities.markdown import (
    escape_table_cell,
    format_number,
    front_matter,
    milestone_status_emoji,
    percent_of,
    progress_bar,
    table,
    vote_emoji,
    wrap_text,
)


class TestProgress:
    def test_progress_bar_45_percent(self):
        assert progress_bar(45) == "█" * 9 + "·" * 11

    def test_progress_bar_bounds(self):
        assert progress_bar(0) == "·" * 20
        assert progress_bar(100) == "█" * 20
        assert progress_bar(130) == "█" * 20

    def test_percent_of(self):
        assert percent_of(1, 3) == 33
        assert percent_of(5, 0) == 0

    @pytest.mark.parametrize(
        "percent,emoji",
        [(100, "✅"), (80, "🔆"), (50, "🔄"), (10, "🚀"), (0, "📋")],
    )
    def test_milestone_status_emoji(self, percent, emoji):
        assert milestone_status_emoji(percent) == emoji

    def test_vote_emoji(self):
        assert vote_emoji("Yes") == "✅"
        assert vote_emoji("No") == "❌"
        assert vote_emoji("Abstain") == "⚪"


class TestText:
    def test_format_number(self):
        assert format_number(1234567) == "1,234,567"
        assert format_number(None) == "0"
        assert format_number(1500.5) == "1,500.5"

    def test_wrap_text_short(self):
        assert wrap_text("short", 70) == "short"
        assert wrap_text(None) == ""

    def test_wrap_text_long(self):
        text = "alpha beta gamma delta"
        assert wrap_text(text, 11) == "alpha beta<br>gamma delta"

    def test_escape_table_cell(self):
        assert escape_table_cell("a |b\n\n  c") == "a \\|b c"

    def test_front_matter(self):
        assert front_matter("2025 Stats", "Yearly stats", "2025") == (
            "---\ntitle: 2025 Stats\ndescription: Yearly stats\nsidebarTitle: '2025'\n---\n"
        )

    def test_table(self):
        assert table(["A", "B"], [[1, "x"]], ["left", "right"]) == (
            "| A | B |\n| :--- | ---: |\n| 1 | x |"
        )
