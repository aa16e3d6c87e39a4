"""
Skill Scanners

Enumerate skill directories either inside a fetched source tree
(`<tree>/skills/*`) or directly under an installed target directory.
Both walks share the same rules: only immediate subdirectories, no
dot-prefixed entries, and a parseable SKILL.md is required.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import structlog

from agent_skills.skills.models import LocalInstalledSkill, SkillCandidate, SkillManifest
from agent_skills.skills.parser import load_manifest

logger = structlog.get_logger(__name__)

SKILLS_DIR = "skills"


def iter_skill_dirs(root: Path) -> Iterator[tuple[Path, SkillManifest]]:
    """
    Yield (directory, manifest) for every valid skill directly under root.

    Entries are visited in name order so results are deterministic.
    """
    if not root.is_dir():
        return

    for item in sorted(root.iterdir(), key=lambda p: p.name):
        if not item.is_dir() or item.name.startswith("."):
            continue

        manifest = load_manifest(item)
        if manifest is None:
            continue

        yield item, manifest


def scan_source_tree(tree_root: Path, origin: str) -> list[SkillCandidate]:
    """
    Discover skill candidates in a fetched source tree.

    Args:
        tree_root: Local root of the fetched repository
        origin: Opaque identity of the source (e.g. its URL)

    Returns:
        Candidates in directory-name order; empty if there is no
        `skills/` directory.
    """
    candidates = [
        SkillCandidate(
            name=manifest.name,
            description=manifest.description,
            directory_name=skill_dir.name,
            origin=origin,
            trigger=manifest.trigger,
        )
        for skill_dir, manifest in iter_skill_dirs(tree_root / SKILLS_DIR)
    ]
    logger.debug("Scanned source tree", origin=origin, count=len(candidates))
    return candidates


def scan_installed(target_dir: Path) -> list[LocalInstalledSkill]:
    """List skills present on disk under a target directory."""
    return [
        LocalInstalledSkill(
            name=manifest.name,
            description=manifest.description,
            directory_name=skill_dir.name,
        )
        for skill_dir, manifest in iter_skill_dirs(target_dir)
    ]
