"""
Markdown building blocks shared by the report generators.
"""

import yaml

PROGRESS_FILLED = "█"
PROGRESS_EMPTY = "·"

VOTE_EMOJI = {"Yes": "✅", "No": "❌", "Abstain": "⚪"}

ALIGNMENT_RULES = {
    "left": ":---",
    "right": "---:",
    "center": ":---:",
    None: "---",
}


def percent_of(part: float, whole: float) -> int:
    """Rounded percentage of ``part`` in ``whole``; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return round(part / whole * 100)


def progress_bar(percent: float, width: int = 20) -> str:
    """
    Render a fixed-width progress bar.

    Each segment stands for 5% on the default 20-segment bar, so 45% renders
    as 9 filled and 11 empty segments.
    """
    filled = max(0, min(width, round(percent / (100 / width))))
    return PROGRESS_FILLED * filled + PROGRESS_EMPTY * (width - filled)


def milestone_status_emoji(percent: float) -> str:
    if percent >= 100:
        return "✅"
    if percent >= 75:
        return "🔆"
    if percent >= 50:
        return "🔄"
    if percent > 0:
        return "🚀"
    return "📋"


def vote_emoji(vote: str) -> str:
    return VOTE_EMOJI.get(vote, VOTE_EMOJI["Abstain"])


def format_number(value: int | float | None) -> str:
    """Format a number with thousands separators, e.g. 1234567 -> "1,234,567"."""
    if value is None:
        return "0"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def wrap_text(text: str | None, max_length: int = 70) -> str:
    """
    Break long text into ``<br>``-separated lines at word boundaries.

    Args:
        text: Text to wrap
        max_length: Maximum characters per line

    Returns:
        Wrapped text (unchanged when already short enough)
    """
    if not text or len(text) <= max_length:
        return text or ""

    lines = []
    current = ""
    for word in text.split(" "):
        if current and len(current + word) > max_length:
            lines.append(current.strip())
            current = ""
        current += word + " "
    lines.append(current.strip())
    return "<br>".join(lines)


def escape_table_cell(text: str | None) -> str:
    """Collapse whitespace and escape pipes so text fits in one table cell."""
    if not text:
        return ""
    return " ".join(text.split()).replace("|", "\\|")


def front_matter(title: str, description: str, sidebar_title: str) -> str:
    """YAML front matter block with title, description and sidebarTitle."""
    body = yaml.safe_dump(
        {"title": title, "description": description, "sidebarTitle": sidebar_title},
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1000,
    )
    return f"---\n{body}---\n"


def table(
    headers: list[str],
    rows: list[list],
    alignments: list[str | None] | None = None,
) -> str:
    """
    Render a Markdown table.

    Args:
        headers: Column headers
        rows: Row cells (converted with str)
        alignments: Per-column "left", "right", "center" or None

    Returns:
        Table text without a trailing newline
    """
    alignments = alignments or [None] * len(headers)
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(ALIGNMENT_RULES[a] for a in alignments) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(str(cell) for cell in row) + " |")
    return "\n".join(lines)
