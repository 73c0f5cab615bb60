"""
Extraction of structured records from scraped HTML, Markdown and raw files.

Every function takes raw text and returns a structured value, or None when the
expected structure is absent or malformed. Parse failures are logged here and
never raised to the caller.
"""

import json
import re
from typing import Any

import yaml
from bs4 import BeautifulSoup

from .logging_config import get_logger

logger = get_logger(__name__)

NEXT_DATA_PATTERN = re.compile(
    r'<script id="__NEXT_DATA__" type="application/json">([\s\S]*?)</script>'
)
NEXT_BUILD_ID_PATTERN = re.compile(r"/_next/data/([^/]+)/en/funds/")
FRONT_MATTER_PATTERN = re.compile(r"^---\n([\s\S]*?)\n---")
VOTE_CONTEXT_COMMENT_PATTERN = re.compile(r'"comment"\s*:\s*"((?:\\.|[\s\S])*?)"')
VOTE_CONTEXT_FOLDER_PATTERN = re.compile(r"^(\d+)_(\w{4})$")
GITHUB_USAGE_SECTION_PATTERN = re.compile(
    r"## 🔍 GitHub Usage Statistics\n\n"
    r"\| Month(?:&nbsp;)*? *\| *Projects *\| *Files *\|\n"
    r"\| *:-+ *\| *-+: *\| *-+: *\|\n"
    r"([\s\S]*?)(?=\n\n|$)"
)
GITHUB_USAGE_ROW_PATTERN = re.compile(r"\| (.*?) \| ([\d,]+) \| ([\d,]+) \|")


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def extract_next_data(html: str) -> dict[str, Any] | None:
    """
    Extract the ``__NEXT_DATA__`` JSON blob of a Next.js page.

    Args:
        html: Page HTML

    Returns:
        Decoded blob or None
    """
    match = NEXT_DATA_PATTERN.search(html or "")
    if not match:
        logger.debug("No __NEXT_DATA__ script in page")
        return None

    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning(f"Malformed __NEXT_DATA__ JSON: {e}")
        return None


def extract_next_build_id(html: str) -> str | None:
    """Extract the Next.js build id from links to ``/_next/data/<id>/en/funds/``."""
    match = NEXT_BUILD_ID_PATTERN.search(html or "")
    return match.group(1) if match else None


def extract_front_matter(markdown: str) -> dict[str, Any] | None:
    """
    Parse the YAML front matter block at the top of a Markdown document.

    Returns:
        Front matter mapping, or None when there is none or it is not a mapping
    """
    match = FRONT_MATTER_PATTERN.match(normalize_newlines(markdown or ""))
    if not match:
        return None

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning(f"Malformed front matter: {e}")
        return None

    return data if isinstance(data, dict) else None


def extract_github_usage_table(markdown: str) -> dict[str, dict[str, int]] | None:
    """
    Recover monthly GitHub usage counts from a rendered yearly stats page.

    Args:
        markdown: Yearly stats page containing the "GitHub Usage Statistics" table

    Returns:
        Mapping of month name to core_in_package_json / core_in_any_file, or
        None when the section is missing
    """
    match = GITHUB_USAGE_SECTION_PATTERN.search(normalize_newlines(markdown or ""))
    if not match:
        return None

    stats = {}
    for row in match.group(1).split("\n"):
        row_match = GITHUB_USAGE_ROW_PATTERN.search(row)
        if not row_match:
            continue
        month, projects, files = row_match.groups()
        stats[month.strip()] = {
            "core_in_package_json": int(projects.replace(",", "")),
            "core_in_any_file": int(files.replace(",", "")),
        }
    return stats


def extract_vote_context_comment(raw: str) -> str | None:
    """
    Extract the ``comment`` string of a Vote_Context.jsonId document.

    The files are hand-edited and frequently not valid JSON (literal newlines
    inside strings), so the value is located with a pattern that stops at the
    first unescaped quote rather than by decoding the document.

    Args:
        raw: File content

    Returns:
        Comment text exactly as written between the quotes, or None
    """
    match = VOTE_CONTEXT_COMMENT_PATTERN.search(normalize_newlines(raw or ""))
    if not match or not match.group(1):
        return None
    return match.group(1)


def parse_vote_context_folder(name: str) -> tuple[int, str] | None:
    """Split a ``<epoch>_<shortId>`` folder name, e.g. ``506_phgh``."""
    match = VOTE_CONTEXT_FOLDER_PATTERN.match(name)
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def extract_dependents_count(html: str) -> int | None:
    """
    Read the repository dependents count from GitHub's dependents page.

    The selected tab reads like "1,234 Repositories".

    Args:
        html: Dependents page HTML

    Returns:
        Count or None when the element is missing or not numeric
    """
    soup = BeautifulSoup(html or "", "html.parser")
    element = soup.select_one("a.btn-link.selected")
    if element is None:
        logger.warning("Dependents selector did not match any content")
        return None

    text = element.get_text(" ", strip=True)
    raw_count = text.split()[0].replace(",", "") if text else ""
    if not raw_count.isdigit():
        logger.warning(f"Extracted dependents text is not a valid number: {text!r}")
        return None
    return int(raw_count)
