"""
Skills Module

Discovers skill packages (directories with a SKILL.md) in source
repositories and installs them into agent skill directories.
"""

from agent_skills.skills.errors import (
    SkillNotFoundError,
    SkillSourceMissingError,
    SkillsError,
    SourceFetchError,
    UnknownAgentError,
)
from agent_skills.skills.manager import SkillsManager
from agent_skills.skills.models import (
    LocalInstalledSkill,
    LockEntry,
    LockLedger,
    ReferenceSelection,
    SkillCandidate,
    SkillManifest,
)
from agent_skills.skills.sources import GitSourceFetcher, SourceFetcher, SourceSet

__all__ = [
    "SkillsManager",
    "SkillManifest",
    "SkillCandidate",
    "LocalInstalledSkill",
    "LockEntry",
    "LockLedger",
    "ReferenceSelection",
    "GitSourceFetcher",
    "SourceFetcher",
    "SourceSet",
    "SkillsError",
    "SourceFetchError",
    "SkillNotFoundError",
    "SkillSourceMissingError",
    "UnknownAgentError",
]
