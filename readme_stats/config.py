from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_CONFIG_PATH = Path("config/settings.yaml")
CONFIG_PATH_ENV = "README_STATS_CONFIG"
USERNAME_ENV = "README_STATS_USERNAME"


@dataclass(slots=True)
class GitHubConfig:
    username: str = "la55u"
    token_env: str = "GITHUB_TOKEN"
    api_root: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    token: Optional[str] = None


@dataclass(slots=True)
class StatsConfig:
    exclude_private: bool = False
    # Not available from the REST API; kept as a configured placeholder.
    sponsored_accounts: int = 3


@dataclass(slots=True)
class OutputConfig:
    template: Path = Path("README.md.j2")
    path: Path = Path("README.md")


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(slots=True)
class AppConfig:
    github: GitHubConfig = field(default_factory=GitHubConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the run configuration from the YAML file and the process environment.

    The environment is only consulted here; the returned object carries the
    token and username to everything downstream.
    """
    env = os.environ if environ is None else environ
    config_path = path or Path(env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    raw: Dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}

    github_raw = raw.get("github", {})
    stats_raw = raw.get("stats", {})
    output_raw = raw.get("output", {})
    logging_raw = raw.get("logging", {})

    github = GitHubConfig(
        username=str(github_raw.get("username", "la55u")),
        token_env=str(github_raw.get("token_env", "GITHUB_TOKEN")),
        api_root=str(github_raw.get("api_root", "https://api.github.com")).rstrip("/"),
        api_version=str(github_raw.get("api_version", "2022-11-28")),
    )
    github.token = env.get(github.token_env) or None
    if env.get(USERNAME_ENV):
        github.username = env[USERNAME_ENV]

    return AppConfig(
        github=github,
        stats=StatsConfig(
            exclude_private=bool(stats_raw.get("exclude_private", False)),
            sponsored_accounts=int(stats_raw.get("sponsored_accounts", 3)),
        ),
        output=OutputConfig(
            template=Path(output_raw.get("template", "README.md.j2")),
            path=Path(output_raw.get("path", "README.md")),
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", "INFO")).upper(),
        ),
    )
