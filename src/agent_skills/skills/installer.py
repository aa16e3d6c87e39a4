"""
Selective Installer

Copies one skill from a fetched source tree into a target directory
and, when the skill needs them, the shared references filtered by the
caller's tech and VCS selection.

Installs overwrite files at the same relative paths. Nothing is deleted:
reference topics installed by an earlier, wider selection are kept.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import structlog

from agent_skills.skills.errors import SkillSourceMissingError
from agent_skills.skills.models import ReferenceSelection
from agent_skills.skills.references import (
    CORE_TOPICS,
    REFERENCES_DIR,
    VCS_COMMON_FILE,
    VCS_TOPIC,
    references_dir_for,
    skill_requires_references,
    vcs_platform_of,
)
from agent_skills.skills.scanner import SKILLS_DIR

logger = structlog.get_logger(__name__)


def copy_tree(src: Path, dest: Path) -> int:
    """
    Recursively copy src into dest, overwriting existing files.

    Returns:
        Number of files copied
    """
    dest.mkdir(parents=True, exist_ok=True)
    copied = 0
    for item in sorted(src.iterdir(), key=lambda p: p.name):
        target = dest / item.name
        if item.is_dir():
            copied += copy_tree(item, target)
        else:
            shutil.copyfile(item, target)
            copied += 1
    return copied


def _copy_file(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)


def vcs_file_selected(filename: str, selected_vcs: str | None) -> bool:
    """Whether a file under `references/vcs/` belongs in the install."""
    if filename == VCS_COMMON_FILE:
        return True
    platform = vcs_platform_of(filename)
    if platform is None:
        return True
    return platform == selected_vcs


def install_references(
    refs_src: Path,
    refs_dest: Path,
    selection: ReferenceSelection,
) -> list[str]:
    """
    Copy the filtered references tree.

    Returns:
        Names of the topic directories that were installed
    """
    refs_dest.mkdir(parents=True, exist_ok=True)
    installed: list[str] = []

    for item in sorted(refs_src.iterdir(), key=lambda p: p.name):
        dest = refs_dest / item.name

        if not item.is_dir():
            _copy_file(item, dest)
            continue

        if item.name in CORE_TOPICS:
            copy_tree(item, dest)
        elif item.name == VCS_TOPIC:
            for vcs_item in sorted(item.iterdir(), key=lambda p: p.name):
                if vcs_item.is_dir():
                    copy_tree(vcs_item, dest / vcs_item.name)
                elif vcs_file_selected(vcs_item.name, selection.vcs):
                    _copy_file(vcs_item, dest / vcs_item.name)
        elif item.name in selection.techs:
            copy_tree(item, dest)
        else:
            logger.debug("Skipping unselected reference topic", topic=item.name)
            continue

        installed.append(item.name)

    return installed


def install_skill(
    tree_root: Path,
    directory_name: str,
    target_dir: Path,
    selection: ReferenceSelection | None = None,
) -> Path:
    """
    Install one skill from a source tree into a target directory.

    Args:
        tree_root: Local root of the fetched source tree
        directory_name: Folder name of the skill under `skills/`
        target_dir: Skills install root for the agent and scope
        selection: Tech/VCS reference selection (defaults to none)

    Returns:
        Path of the installed skill directory

    Raises:
        SkillSourceMissingError: If the skill directory is not in the tree
    """
    selection = selection or ReferenceSelection()
    skill_src = tree_root / SKILLS_DIR / directory_name
    if not skill_src.is_dir():
        raise SkillSourceMissingError(directory_name, skill_src)

    skill_dest = target_dir / directory_name
    copied = copy_tree(skill_src, skill_dest)
    logger.debug("Copied skill files", skill=directory_name, files=copied)

    refs_src = tree_root / REFERENCES_DIR
    if refs_src.is_dir() and skill_requires_references(skill_src):
        refs_dest = references_dir_for(target_dir)
        topics = install_references(refs_src, refs_dest, selection)
        logger.debug("Installed references", skill=directory_name, topics=topics)

    return skill_dest
