"""
Skills Errors

Fatal conditions raised by the skills engine. Every error carries a
single human-readable message; the CLI decides the exit code.
"""

from __future__ import annotations

from pathlib import Path


class SkillsError(Exception):
    """Base class for fatal skills-engine errors."""
    pass


class SourceFetchError(SkillsError):
    """Raised when a source repository cannot be materialized locally."""

    def __init__(self, identity: str, detail: str | None = None):
        self.identity = identity
        message = f"Failed to fetch source repository: {identity}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class SkillNotFoundError(SkillsError):
    """Raised when a requested skill is not among the known skills."""

    def __init__(self, name: str, available: list[str], installed: bool = False):
        self.name = name
        self.available = available
        if installed:
            message = f'Skill "{name}" is not installed.\nInstalled: {", ".join(available) or "(none)"}'
        else:
            message = f'Skill "{name}" not found.\nAvailable: {", ".join(available) or "(none)"}'
        super().__init__(message)


class SkillSourceMissingError(SkillsError):
    """Raised when a resolved skill's directory is gone from the source tree."""

    def __init__(self, directory_name: str, path: Path):
        self.directory_name = directory_name
        self.path = path
        super().__init__(
            f'Skill directory "{directory_name}" not found at expected path: {path}\n'
            "The repository may have an unexpected structure or the skill was removed."
        )


class UnknownAgentError(SkillsError):
    """Raised for an agent flag missing from the registry."""

    def __init__(self, flag: str, valid: list[str]):
        self.flag = flag
        super().__init__(f'Unknown agent "{flag}".\nValid agents: {", ".join(valid)}')
