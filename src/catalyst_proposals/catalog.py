"""
Supplementary project catalogue.

Supabase only stores budgets and milestone counts; names, project URLs,
categories and status come from a YAML catalogue kept next to the pages:

    projects:
      - id: "1000107"
        name: Cardano Open-Source Developer Ecosystem
        url: https://projectcatalyst.io/funds/10/f10-osde-open-source-dev-ecosystem/...
        category: "F10: OSDE: Open Source Dev Ecosystem"
        status: Completed
        finished: "2024-03-01"
        budget: 100000
        milestones_qty: 5
        funds_distributed: 100000
        milestonesCompleted: 5
"""

from pathlib import Path

import yaml

from ..shared_utilities.logging_config import get_logger

logger = get_logger(__name__)


def load_catalog(path: Path) -> dict[str, dict]:
    """
    Load the catalogue keyed by project id.

    A missing file yields an empty catalogue.

    Raises:
        ValueError: If the file is not a list of projects
    """
    if not path.exists():
        logger.warning(f"No project catalogue at {path}")
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    projects = data.get("projects", []) if isinstance(data, dict) else data
    if not isinstance(projects, list):
        raise ValueError(f"Project catalogue {path} must contain a list of projects")

    catalog = {}
    for project in projects:
        if not isinstance(project, dict) or "id" not in project:
            logger.warning(f"Skipping catalogue entry without id: {project}")
            continue
        catalog[str(project["id"])] = project

    logger.debug(f"Loaded {len(catalog)} catalogue projects")
    return catalog
