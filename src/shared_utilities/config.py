"""
Run configuration shared by every update tool.

The configuration is assembled once at process start from environment variables
and ``config.json`` and handed explicitly to each component.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT_ROOT = Path("mesh-gov-updates")
DEFAULT_CONFIG_FILE = Path("config.json")
DEFAULT_RATIONALES_FILE = Path("voting-history/missing-voting-rationales/rationales.json")

TRACKED_PACKAGES = {
    "core": "@meshsdk/core",
    "react": "@meshsdk/react",
    "transaction": "@meshsdk/transaction",
    "wallet": "@meshsdk/wallet",
    "provider": "@meshsdk/provider",
    "coreCsl": "@meshsdk/core-csl",
    "coreCst": "@meshsdk/core-cst",
}

# Environment variable backing each configurable field
ENV_VARS = {
    "github_token": "GITHUB_TOKEN",
    "koios_api_key": "KOIOS_API_KEY",
    "discord_token": "DISCORD_TOKEN",
    "guild_id": "GUILD_ID",
    "supabase_url": "NEXT_PUBLIC_SUPABASE_URL2",
    "supabase_key": "NEXT_PUBLIC_SUPABASE_ANON_KEY2",
    "discord_webhook_url": "DISCORD_WEBHOOK_URL",
    "milestones_base_url": "NEXT_PUBLIC_MILESTONES_URL",
}


class ConfigurationError(Exception):
    """Raised when a required token, identifier or config field is missing."""

    pass


@dataclass
class AppConfig:
    """Configuration for a single tool invocation."""

    output_root: Path = DEFAULT_OUTPUT_ROOT
    github_token: str | None = None
    koios_api_key: str | None = None
    discord_token: str | None = None
    guild_id: str | None = None
    supabase_url: str | None = None
    supabase_key: str | None = None
    discord_webhook_url: str | None = None
    milestones_base_url: str = "https://milestones.projectcatalyst.io"
    project_ids: list[str] = field(default_factory=list)
    drep_id: str | None = None
    organization_name: str | None = None
    github_org: str = "MeshJS"
    core_package: str = "@meshsdk/core"
    packages: dict[str, str] = field(default_factory=lambda: dict(TRACKED_PACKAGES))
    governance_repo: str = "MeshJS/governance"
    rationales_file: Path = DEFAULT_RATIONALES_FILE
    catalyst_catalog: Path | None = None

    def require(self, *names: str) -> None:
        """
        Ensure that every named field is set.

        Args:
            names: AppConfig field names

        Raises:
            ConfigurationError: Listing every missing value
        """
        missing = []
        for name in names:
            if not getattr(self, name):
                missing.append(ENV_VARS.get(name, _config_key(name)))

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

    @property
    def use_mock_catalyst_data(self) -> bool:
        """Supabase credentials are optional; without them catalog data is used."""
        return not (self.supabase_url and self.supabase_key)

    @property
    def catalyst_catalog_path(self) -> Path:
        """Supplementary project catalogue (names, URLs, categories)."""
        if self.catalyst_catalog:
            return Path(self.catalyst_catalog)
        return self.output_root / "catalyst-proposals" / "projects.yaml"


def _config_key(name: str) -> str:
    """Map a snake_case field name to its camelCase config.json key."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def load_config_file(config_file: Path) -> dict:
    """
    Load config.json, returning an empty mapping if it does not exist.

    Raises:
        ConfigurationError: If the file exists but is not valid JSON
    """
    if not config_file.exists():
        logger.debug(f"No config file at {config_file}")
        return {}

    try:
        with open(config_file, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_file}: {e}") from e


def load_config(
    config_file: Path | str | None = None,
    output_root: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> AppConfig:
    """
    Build the run configuration from environment variables and config.json.

    Args:
        config_file: Path to config.json (default: ./config.json)
        output_root: Root directory for snapshots and Markdown output
        environ: Environment mapping (default: os.environ)

    Returns:
        Populated AppConfig
    """
    env = os.environ if environ is None else environ
    file_data = load_config_file(Path(config_file or DEFAULT_CONFIG_FILE))

    values: dict = {}
    for name, env_var in ENV_VARS.items():
        value = env.get(env_var)
        if value:
            values[name] = value

    project_ids = [pid.strip() for pid in env.get("README_PROJECT_IDS", "").split(",")]
    if any(project_ids):
        values["project_ids"] = [pid for pid in project_ids if pid]

    known = {f.name for f in fields(AppConfig)}
    for key, value in file_data.items():
        name = _snake_case(key)
        if name in known and name not in values:
            values[name] = value

    if output_root is not None:
        values["output_root"] = Path(output_root)
    for name in ("output_root", "rationales_file"):
        if isinstance(values.get(name), str):
            values[name] = Path(values[name])

    return AppConfig(**values)


def _snake_case(key: str) -> str:
    """Map a camelCase config.json key to a field name."""
    out = []
    for char in key:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)
