"""
Tests for the Catalyst overview and fund pages.
"""

from datetime import datetime
from unittest.mock import Mock

import yaml

from src.catalyst_proposals.collector import CATALYST_DATA_PATH
from src.catalyst_proposals.main import run
from src.catalyst_proposals.output_formatter import (
    CatalystOverviewFormatter,
    FundPageFormatter,
    fund_page_name,
    project_table,
)


def project(project_id, name, budget, distributed, qty, completed, **details):
    return {
        "projectDetails": {
            "project_id": project_id,
            "name": name,
            "url": f"https://projectcatalyst.io/funds/{project_id[:2]}/f{project_id[:2]}-dev/{name}",
            "category": "F10: OSDE: Open Source Dev Ecosystem",
            "status": "In Progress",
            "budget": budget,
            "funds_distributed": distributed,
            "milestones_qty": qty,
            "finished": "",
            **details,
        },
        "milestonesCompleted": completed,
    }


PROJECTS = [
    project("1000107", "mesh-sdk", 100000, 50000, 5, 2),
    project("1100271", "mesh-pluts", 50000, 50000, 4, 4, finished="2025-01-20"),
]

EXISTING_OVERVIEW = """---
title: Custom Title
sidebarTitle: Catalyst
---

# Project Catalyst Proposals

Hand written introduction.

## MeshJS Proposal Overview

> **Data Source**: Real data from Catalyst

stale generated content

### Documentation Organization

Hand written trailer.
"""


def test_fund_page_name():
    assert fund_page_name("10") == "0010.md"


class TestProjectTable:
    def test_rows(self):
        table = project_table(PROJECTS[0], "https://milestones.test")

        assert table.startswith("###### 1000107\n\n")
        assert "| **Milestones** | [Milestones](https://milestones.test/projects/1000107) |" in table
        assert "| **Funding Category** | F10: OSDE: Open Source Dev Ecosystem |" in table
        assert "| **Status** | 🚀 In Progress |" in table
        assert "| **Milestones completed** | 2/5 (40%) |" in table
        assert "| **Funds distributed** | ADA 50,000 of 100,000 (50%) |" in table
        assert "| **Funding Progress** | `██████████··········` |" in table
        assert "**Finished**" not in table

    def test_finished_row(self):
        assert "| **Finished** | 2025-01-20 |" in project_table(PROJECTS[1], "https://m.test")


class TestCatalystOverviewFormatter:
    def test_new_page(self):
        page = CatalystOverviewFormatter(
            use_mock_data=True, generated_at=datetime(2025, 3, 15, 14, 5)
        ).format({"projects": PROJECTS})

        assert page.startswith("---\ntitle: Project Catalyst Proposals\n")
        assert "> **Data Source**: Mock data (Credentials not available)" in page
        assert "> **Last Updated**: March 15, 2025 at 02:05 PM UTC" in page
        assert "| Total completed: 6/9 (67%)" in page
        assert "#### [Fund 11](/en/catalyst-proposals/0011)" in page
        assert "| [1000107](/en/catalyst-proposals/0010#1000107) |" in page

    def test_existing_page_sections_preserved(self):
        page = CatalystOverviewFormatter(
            EXISTING_OVERVIEW, generated_at=datetime(2025, 3, 15)
        ).format({"projects": PROJECTS})

        assert page.startswith("---\ntitle: Custom Title\nsidebarTitle: Catalyst\n---\n\n")
        assert "Hand written introduction." in page
        assert "stale generated content" not in page
        assert page.endswith("\n### Documentation Organization\n\nHand written trailer.\n")


class TestFundPageFormatter:
    def test_existing_title_kept(self):
        existing = "---\ntitle: Fund 10\n---\n\n# Fund 10 Proposals\n\nold tables\n"
        page = FundPageFormatter("https://m.test", existing).format(
            {"fund": "10", "projects": PROJECTS[:1]}
        )

        assert page.startswith("---\ntitle: Fund 10\n---\n\n# Fund 10\n\n###### 1000107")
        assert "old tables" not in page


class TestRun:
    def test_catalogue_only_run(self, app_config, store):
        catalog_path = app_config.catalyst_catalog_path
        catalog_path.parent.mkdir(parents=True)
        catalog_path.write_text(
            yaml.safe_dump(
                {
                    "projects": [
                        {
                            "id": "1000107",
                            "name": "Mesh SDK",
                            "url": "https://projectcatalyst.io/funds/10/f10-dev/mesh",
                            "budget": 100000,
                            "milestones_qty": 5,
                            "funds_distributed": 20000,
                            "milestonesCompleted": 1,
                        }
                    ]
                }
            )
        )
        voting_client = _no_voting()

        assert run(app_config, voting_client=voting_client) == 0

        data = store.load_json(CATALYST_DATA_PATH)
        assert data["useMockData"] is True
        assert data["projects"][0]["projectDetails"]["project_id"] == "1000107"
        assert store.exists("catalyst-proposals/markdown/0001.md")
        assert store.exists("catalyst-proposals/markdown/0010.md")

    def test_no_projects(self, app_config):
        assert run(app_config, voting_client=_no_voting()) == 1


def _no_voting():
    client = Mock()
    client.project_voting.return_value = None
    return client
