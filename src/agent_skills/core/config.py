"""
Configuration management for agent-skills.

Uses pydantic-settings for environment variable loading and a pydantic
model for the per-project `.agent-skills.json` file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

DEFAULT_REPO = "https://github.com/jame2408/agent-skills.git"
CONFIG_FILENAME = ".agent-skills.json"


class AgentSkillsSettings(BaseSettings):
    """Runtime settings, overridable with AGENT_SKILLS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_SKILLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_repo: str = Field(
        default=DEFAULT_REPO,
        description="Source repository used when no other is configured",
    )
    config_filename: str = Field(
        default=CONFIG_FILENAME,
        description="Project config file name, relative to the working directory",
    )
    git_executable: str = Field(
        default="git",
        description="Git binary used to fetch sources",
    )
    clone_depth: int = Field(
        default=1,
        ge=1,
        description="History depth for source clones",
    )
    fetch_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before a git invocation is abandoned",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )


class ProjectConfig(BaseModel):
    """Contents of `.agent-skills.json`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    default_agent: str | None = Field(default=None, alias="defaultAgent")
    repos: list[str] | None = None
    techs: list[str] | None = None
    vcs: str | None = None


def config_path(settings: AgentSkillsSettings, cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / settings.config_filename


def load_project_config(
    settings: AgentSkillsSettings,
    cwd: Path | None = None,
) -> ProjectConfig | None:
    """Load the project config, or None if absent or malformed."""
    path = config_path(settings, cwd)
    if not path.is_file():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return ProjectConfig.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("Ignoring malformed project config", path=str(path), error=str(e))
        return None


def save_project_config(
    settings: AgentSkillsSettings,
    config: ProjectConfig,
    cwd: Path | None = None,
) -> Path:
    path = config_path(settings, cwd)
    data = config.model_dump(by_alias=True, exclude_none=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def resolve_repos(
    settings: AgentSkillsSettings,
    repo_flag: str | None = None,
    project: ProjectConfig | None = None,
) -> list[str]:
    """
    Resolve which source repositories to use.

    Priority: explicit flag > project config `repos` > default repo.
    """
    if repo_flag:
        return [repo_flag]
    if project and project.repos:
        return list(project.repos)
    return [settings.default_repo]
