"""
Skills Manager

Orchestrates fetch, install, update and removal of skills against one
target directory at a time, keeping the lock ledger in step.

The filesystem is the source of truth for what is installed; the lock
ledger only records versions and may be stale or missing.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable

import structlog

from agent_skills.core.config import AgentSkillsSettings
from agent_skills.skills.errors import SkillNotFoundError
from agent_skills.skills.installer import install_skill
from agent_skills.skills.lockfile import read_ledger, write_ledger
from agent_skills.skills.models import (
    AvailableReferences,
    InstallReport,
    LocalInstalledSkill,
    ReferenceSelection,
    RemoveReport,
    SkillCandidate,
    SkillDetails,
    UpdateReport,
)
from agent_skills.skills.parser import extract_full_description, read_manifest_text
from agent_skills.skills.references import (
    REFERENCES_DIR,
    cleanup_unused_references,
    requires_references,
    scan_available_references,
    skill_requires_references,
)
from agent_skills.skills.scanner import SKILLS_DIR, scan_installed
from agent_skills.skills.sources import (
    UNKNOWN_REVISION,
    GitSourceFetcher,
    SourceFetcher,
    SourceSet,
    fetch_all,
)

logger = structlog.get_logger(__name__)


def find_candidate(candidates: list[SkillCandidate], name: str) -> SkillCandidate:
    """
    Resolve a skill by directory name or manifest name.

    Returns the first match in aggregation (source-list) order.

    Raises:
        SkillNotFoundError: With the available directory names
    """
    for candidate in candidates:
        if candidate.directory_name == name or candidate.name == name:
            return candidate
    raise SkillNotFoundError(name, [c.directory_name for c in candidates])


def find_installed(installed: list[LocalInstalledSkill], name: str) -> LocalInstalledSkill:
    for skill in installed:
        if skill.directory_name == name or skill.name == name:
            return skill
    raise SkillNotFoundError(name, [s.directory_name for s in installed], installed=True)


def search_candidates(candidates: list[SkillCandidate], keyword: str) -> list[SkillCandidate]:
    """Case-insensitive substring match on name, description and directory."""
    needle = keyword.lower()
    return [
        c for c in candidates
        if needle in c.name.lower()
        or needle in c.description.lower()
        or needle in c.directory_name.lower()
    ]


def list_files(root: Path) -> list[str]:
    """All files under root as sorted POSIX paths relative to root."""
    return sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_file()
    )


class SkillsManager:
    """
    Installs and maintains skills from configured sources.

    Example:
        ```python
        manager = SkillsManager()
        with manager.fetch(["https://github.com/org/skills.git"]) as sources:
            report = manager.add(sources, ["pdf-processing"], Path(".claude/skills"))
        ```
    """

    def __init__(
        self,
        settings: AgentSkillsSettings | None = None,
        fetcher: SourceFetcher | None = None,
    ):
        """
        Initialize the Skills Manager.

        Args:
            settings: Runtime settings (defaults loaded from the environment)
            fetcher: Source fetcher (defaults to a git-backed fetcher)
        """
        self.settings = settings or AgentSkillsSettings()
        self.fetcher = fetcher or GitSourceFetcher(
            git_executable=self.settings.git_executable,
            depth=self.settings.clone_depth,
            timeout=self.settings.fetch_timeout,
        )

    def fetch(self, repos: Iterable[str]) -> SourceSet:
        """Fetch and scan all repos; use the result as a context manager."""
        return fetch_all(repos, self.fetcher)

    def skill_version(self, sources: SourceSet, candidate: SkillCandidate) -> str:
        """
        Version marker for one skill: the latest revision touching the
        skill directory (and references, if the skill uses them).
        """
        tree = sources.tree_for(candidate)
        paths = [f"{SKILLS_DIR}/{candidate.directory_name}"]
        if skill_requires_references(tree / SKILLS_DIR / candidate.directory_name):
            paths.append(REFERENCES_DIR)

        version = self.fetcher.path_revision(tree, paths)
        if version == UNKNOWN_REVISION:
            version = self.fetcher.tree_revision(tree)
        return version

    def needs_references(self, sources: SourceSet, candidates: Iterable[SkillCandidate]) -> bool:
        return any(
            skill_requires_references(sources.tree_for(c) / SKILLS_DIR / c.directory_name)
            for c in candidates
        )

    def available_references(self, sources: SourceSet) -> AvailableReferences:
        return scan_available_references(sources.trees.values())

    def add(
        self,
        sources: SourceSet,
        names: list[str],
        target_dir: Path,
        selection: ReferenceSelection | None = None,
    ) -> InstallReport:
        """
        Install skills by name into a target directory.

        All names are resolved before anything is copied, so an unknown
        name leaves the target untouched.
        """
        resolved: list[SkillCandidate] = []
        for name in names:
            candidate = find_candidate(sources.candidates, name)
            if candidate not in resolved:
                resolved.append(candidate)
        return self.install_candidates(sources, resolved, target_dir, selection)

    def install_candidates(
        self,
        sources: SourceSet,
        candidates: list[SkillCandidate],
        target_dir: Path,
        selection: ReferenceSelection | None = None,
    ) -> InstallReport:
        report = InstallReport(target_dir=target_dir)
        if not candidates:
            return report

        ledger = read_ledger(target_dir)
        try:
            for candidate in candidates:
                install_skill(
                    sources.tree_for(candidate),
                    candidate.directory_name,
                    target_dir,
                    selection,
                )
                ledger.upsert(
                    candidate.name,
                    version=self.skill_version(sources, candidate),
                    source=candidate.origin,
                )
                report.installed.append(candidate)
                logger.info("Installed skill", name=candidate.name, target=str(target_dir))
        finally:
            # Skills copied before a failure keep their entries.
            if report.installed:
                write_ledger(target_dir, ledger)
        return report

    def remove(self, target_dir: Path, names: list[str]) -> RemoveReport:
        """
        Remove installed skills by name or directory name.

        Raises:
            SkillNotFoundError: If a name is not installed
        """
        installed = scan_installed(target_dir)
        selected: list[LocalInstalledSkill] = []
        for name in names:
            skill = find_installed(installed, name)
            if skill not in selected:
                selected.append(skill)
        return self.remove_installed(target_dir, selected)

    def remove_installed(self, target_dir: Path, skills: list[LocalInstalledSkill]) -> RemoveReport:
        """
        Remove already-resolved skills and clean up references nobody needs.

        Skills are deleted by their exact directory name; nothing is
        looked up again.
        """
        report = RemoveReport(target_dir=target_dir)
        if not skills:
            return report

        ledger = read_ledger(target_dir)
        for skill in skills:
            shutil.rmtree(target_dir / skill.directory_name)
            ledger.discard(skill.name)
            report.removed.append(skill)
            logger.info("Removed skill", name=skill.name, target=str(target_dir))

        write_ledger(target_dir, ledger)
        report.references_cleaned = cleanup_unused_references(target_dir)
        return report

    def update(
        self,
        sources: SourceSet,
        target_dir: Path,
        names: list[str] | None = None,
        selection: ReferenceSelection | None = None,
    ) -> UpdateReport:
        """
        Re-install installed skills whose source version has changed.

        Skills whose ledger version equals the current marker are not
        copied and keep their install timestamp.
        """
        report = UpdateReport(target_dir=target_dir)
        installed = scan_installed(target_dir)
        if names:
            installed = [
                s for s in installed
                if s.directory_name in names or s.name in names
            ]
        if not installed:
            return report

        ledger = read_ledger(target_dir)
        for local in installed:
            remote = next(
                (
                    c for c in sources.candidates
                    if c.directory_name == local.directory_name or c.name == local.name
                ),
                None,
            )
            if remote is None:
                report.skipped[local.name] = "not_found"
                continue

            version = self.skill_version(sources, remote)
            entry = ledger.get(local.name)
            if entry is not None and entry.version == version:
                report.skipped[local.name] = "up_to_date"
                continue

            install_skill(sources.tree_for(remote), remote.directory_name, target_dir, selection)
            ledger.upsert(local.name, version=version, source=remote.origin)
            report.updated.append(local.name)
            logger.info("Updated skill", name=local.name, version=version)

        if report.updated:
            write_ledger(target_dir, ledger)
        return report

    def search(self, sources: SourceSet, keyword: str) -> list[SkillCandidate]:
        return search_candidates(sources.candidates, keyword)

    def info(self, sources: SourceSet, name: str) -> SkillDetails:
        """Build the detail view of a remote skill."""
        candidate = find_candidate(sources.candidates, name)
        skill_dir = sources.tree_for(candidate) / SKILLS_DIR / candidate.directory_name
        content = read_manifest_text(skill_dir) or ""

        return SkillDetails(
            candidate=candidate,
            full_description=extract_full_description(content),
            uses_references=requires_references(content),
            manifest_lines=len(content.split("\n")),
            files=list_files(skill_dir),
        )
