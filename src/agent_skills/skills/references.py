"""
Shared References

A source tree may carry a `references/` directory of topic folders
shared by all skills. Installed references live next to the skills
target directory (`<target>/../references`), one copy per install root.

Topic rules:
- core topics (general, runtime, shell) are always installed
- `vcs/` is filtered per file by the selected VCS platform
- any other topic is an optional tech topic, installed only if selected
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Iterable

import structlog

from agent_skills.skills.models import AvailableReferences
from agent_skills.skills.parser import read_manifest_text
from agent_skills.skills.scanner import scan_installed

logger = structlog.get_logger(__name__)

REFERENCES_DIR = "references"
CORE_TOPICS = frozenset({"general", "runtime", "shell"})
VCS_TOPIC = "vcs"
VCS_COMMON_FILE = "vcs-platform-commands.ref.md"
VCS_PLATFORM_PATTERN = re.compile(r"^code-review-posting-(.+)\.ref\.md$")

_REFERENCE_MARKERS = ("references/", "references\\")


def requires_references(manifest_text: str) -> bool:
    """
    Decide whether a skill needs the shared references tree.

    Currently a textual check: the SKILL.md mentions a path under
    `references/` (either slash style).
    """
    return any(marker in manifest_text for marker in _REFERENCE_MARKERS)


def skill_requires_references(skill_dir: Path) -> bool:
    content = read_manifest_text(skill_dir)
    return content is not None and requires_references(content)


def references_dir_for(target_dir: Path) -> Path:
    """
    Shared references location for a skills target directory.

    The parent is taken lexically, so a symlinked target keeps its
    references next to the link.
    """
    return Path(os.path.abspath(target_dir)).parent / REFERENCES_DIR


def vcs_platform_of(filename: str) -> str | None:
    """Platform named by a `code-review-posting-<platform>.ref.md` file."""
    match = VCS_PLATFORM_PATTERN.match(filename)
    return match.group(1) if match else None


def scan_available_references(trees: Iterable[Path]) -> AvailableReferences:
    """
    Collect the optional tech topics and VCS platforms offered by trees.

    Used to decide whether the caller needs to choose a selection at all.
    """
    techs: set[str] = set()
    platforms: set[str] = set()

    for tree in trees:
        refs_root = tree / REFERENCES_DIR
        if not refs_root.is_dir():
            continue

        for topic in refs_root.iterdir():
            if not topic.is_dir():
                continue
            if topic.name == VCS_TOPIC:
                for item in topic.iterdir():
                    platform = vcs_platform_of(item.name) if item.is_file() else None
                    if platform:
                        platforms.add(platform)
            elif topic.name not in CORE_TOPICS:
                techs.add(topic.name)

    return AvailableReferences(techs=sorted(techs), vcs=sorted(platforms))


def cleanup_unused_references(target_dir: Path) -> bool:
    """
    Delete the shared references tree if no installed skill needs it.

    Runs after removals. No per-topic pruning: if any remaining skill
    requires references, the whole tree is left as is.

    Returns:
        True if the references directory was deleted
    """
    refs_dir = references_dir_for(target_dir)
    if not refs_dir.exists():
        return False

    for skill in scan_installed(target_dir):
        if skill_requires_references(target_dir / skill.directory_name):
            logger.debug("References still in use", skill=skill.name)
            return False

    shutil.rmtree(refs_dir)
    logger.info("Removed unused references directory", path=str(refs_dir))
    return True
