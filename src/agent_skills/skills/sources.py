"""
Skill Sources

Materializes configured source repositories as temporary local trees
and aggregates the skills they offer. The fetch itself is behind the
`SourceFetcher` protocol; `GitSourceFetcher` is the default and shells
out to git.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

import structlog

from agent_skills.skills.errors import SourceFetchError
from agent_skills.skills.models import SkillCandidate
from agent_skills.skills.scanner import scan_source_tree

logger = structlog.get_logger(__name__)

UNKNOWN_REVISION = "unknown"


class SourceFetcher(Protocol):
    """Materializes a source identity as a local, read-only tree."""

    def fetch(self, identity: str) -> Path:
        """Return a local path the caller must delete; raise SourceFetchError on failure."""
        ...

    def tree_revision(self, tree: Path) -> str:
        """Revision of the whole tree, or "unknown"."""
        ...

    def path_revision(self, tree: Path, relative_paths: list[str]) -> str:
        """Latest revision touching any of the paths, or "unknown"."""
        ...


class GitSourceFetcher:
    """
    Fetch sources with a shallow, single-branch `git clone`.

    Example:
        ```python
        fetcher = GitSourceFetcher()
        tree = fetcher.fetch("https://github.com/org/skills.git")
        print(fetcher.tree_revision(tree))
        ```
    """

    def __init__(
        self,
        git_executable: str = "git",
        depth: int = 1,
        timeout: float | None = None,
    ):
        self.git_executable = git_executable
        self.depth = depth
        self.timeout = timeout

    def _git(self, args: list[str], cwd: Path | None = None) -> str:
        result = subprocess.run(
            [self.git_executable, *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=self.timeout,
        )
        return result.stdout.strip()

    def fetch(self, identity: str) -> Path:
        tmp_dir = Path(tempfile.mkdtemp(prefix="agent-skills-"))
        logger.info("Cloning source", repo=identity, path=str(tmp_dir))
        try:
            self._git([
                "clone",
                "--depth", str(self.depth),
                "--single-branch",
                identity,
                str(tmp_dir),
            ])
        except (OSError, subprocess.SubprocessError) as e:
            remove_tree(tmp_dir)
            stderr = getattr(e, "stderr", None) or str(e)
            logger.error("Clone failed", repo=identity, error=stderr.strip())
            raise SourceFetchError(
                identity,
                "Make sure the URL is correct and you have access (SSH key / token).",
            ) from e
        return tmp_dir

    def tree_revision(self, tree: Path) -> str:
        try:
            return self._git(["rev-parse", "HEAD"], cwd=tree) or UNKNOWN_REVISION
        except (OSError, subprocess.SubprocessError):
            return UNKNOWN_REVISION

    def path_revision(self, tree: Path, relative_paths: list[str]) -> str:
        try:
            output = self._git(["log", "-1", "--format=%H", "--", *relative_paths], cwd=tree)
        except (OSError, subprocess.SubprocessError):
            return UNKNOWN_REVISION
        return output or UNKNOWN_REVISION


def remove_tree(path: Path) -> None:
    """Best-effort recursive delete; failures are logged, never raised."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temporary tree", path=str(path), error=str(e))


@dataclass
class SourceSet:
    """
    Skills aggregated from several fetched sources.

    Candidates keep source-list order; duplicate names across sources
    are all retained. Use as a context manager to delete the fetched
    trees on exit.
    """
    candidates: list[SkillCandidate] = field(default_factory=list)
    trees: dict[str, Path] = field(default_factory=dict)

    def tree_for(self, candidate: SkillCandidate) -> Path:
        return self.trees[candidate.origin]

    def cleanup(self) -> None:
        for tree in self.trees.values():
            remove_tree(tree)
        self.trees.clear()

    def __enter__(self) -> SourceSet:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()


def fetch_all(identities: Iterable[str], fetcher: SourceFetcher) -> SourceSet:
    """
    Fetch and scan every source in order.

    If any fetch fails, trees already fetched are deleted before the
    error propagates.
    """
    sources = SourceSet()
    try:
        for identity in identities:
            if identity in sources.trees:
                continue
            tree = fetcher.fetch(identity)
            sources.trees[identity] = tree
            sources.candidates.extend(scan_source_tree(tree, identity))
    except BaseException:
        sources.cleanup()
        raise

    logger.info(
        "Fetched skill sources",
        sources=len(sources.trees),
        skills=len(sources.candidates),
    )
    return sources
