"""
Agent Skills Data Models

Defines the records passed between the scanner, installer and
lock ledger. Discovery results are plain dataclasses; the persisted
lock ledger is a pydantic model so it round-trips through JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class SkillManifest:
    """
    Metadata parsed from a SKILL.md header block.

    `description` holds the first non-blank line only; the full text
    is available through `parser.extract_full_description`.
    """
    name: str
    description: str = ""
    trigger: str | None = None


@dataclass(frozen=True)
class SkillCandidate:
    """A skill discovered inside a fetched source tree."""
    name: str
    description: str
    directory_name: str
    origin: str
    trigger: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Stable identity across sources (names may collide)."""
        return (self.origin, self.directory_name)


@dataclass(frozen=True)
class LocalInstalledSkill:
    """A skill reconstructed from what exists under a target directory."""
    name: str
    description: str
    directory_name: str


@dataclass(frozen=True)
class ReferenceSelection:
    """
    Reference topics chosen for a single install operation.

    Never persisted. An empty selection still installs the core
    topics and the platform-neutral VCS files.
    """
    techs: frozenset[str] = field(default_factory=frozenset)
    vcs: str | None = None

    @classmethod
    def from_values(
        cls,
        techs: list[str] | None = None,
        vcs: str | None = None,
    ) -> ReferenceSelection:
        return cls(techs=frozenset(techs or ()), vcs=vcs or None)


@dataclass(frozen=True)
class AvailableReferences:
    """Optional topics offered by the fetched source trees."""
    techs: list[str] = field(default_factory=list)
    vcs: list[str] = field(default_factory=list)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LockEntry(BaseModel):
    """One installed skill in the lock ledger."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    source: str = Field(alias="repo")
    installed_at: datetime = Field(default_factory=utc_now, alias="installedAt")


class LockLedger(BaseModel):
    """
    Persisted mapping of installed skill name to its lock entry.

    Keyed by skill *name*, not directory name.
    """

    model_config = ConfigDict(populate_by_name=True)

    entries: dict[str, LockEntry] = Field(default_factory=dict, alias="skills")

    def upsert(self, name: str, version: str, source: str) -> LockEntry:
        entry = LockEntry(version=version, source=source)
        self.entries[name] = entry
        return entry

    def discard(self, name: str) -> bool:
        return self.entries.pop(name, None) is not None

    def get(self, name: str) -> LockEntry | None:
        return self.entries.get(name)


@dataclass
class SkillDetails:
    """Detail view of a remote skill, used by `info`."""
    candidate: SkillCandidate
    full_description: str
    uses_references: bool
    manifest_lines: int
    files: list[str] = field(default_factory=list)


@dataclass
class InstallReport:
    """Outcome of an add operation."""
    target_dir: Path
    installed: list[SkillCandidate] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.installed)


@dataclass
class RemoveReport:
    """Outcome of a remove operation."""
    target_dir: Path
    removed: list[LocalInstalledSkill] = field(default_factory=list)
    references_cleaned: bool = False

    @property
    def count(self) -> int:
        return len(self.removed)


@dataclass
class UpdateReport:
    """
    Outcome of an update run against one target directory.

    `skipped` maps skill name to a reason: "not_found" when no source
    offers it, "up_to_date" when the lock version already matches.
    """
    target_dir: Path
    updated: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.updated)
