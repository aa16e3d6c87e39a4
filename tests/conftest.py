"""
Shared fixtures: on-disk source trees and a fetcher that serves them
without git.
"""

import shutil
import tempfile
from pathlib import Path

import pytest
import structlog

from agent_skills.core.config import AgentSkillsSettings
from agent_skills.skills.errors import SourceFetchError
from agent_skills.skills.manager import SkillsManager


def write_skill(tree: Path, dir_name: str, name: str, description: str = "A skill", body: str = "", extra: str = "") -> Path:
    """Create `<tree>/skills/<dir_name>/SKILL.md` and return the skill dir."""
    skill_dir = tree / "skills" / dir_name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {name}\ndescription: {description}\n{extra}---\n{body}\n",
        encoding="utf-8",
    )
    return skill_dir


def write_references(tree: Path) -> Path:
    """Create a references tree with core, vcs and optional tech topics."""
    refs = tree / "references"
    for topic in ("general", "runtime", "shell", "python", "go"):
        (refs / topic).mkdir(parents=True)
        (refs / topic / f"{topic}.ref.md").write_text(f"# {topic}\n")
    vcs = refs / "vcs"
    vcs.mkdir()
    (vcs / "vcs-platform-commands.ref.md").write_text("# commands\n")
    (vcs / "code-review-posting-github.ref.md").write_text("# github\n")
    (vcs / "code-review-posting-gitlab.ref.md").write_text("# gitlab\n")
    (vcs / "branching.ref.md").write_text("# branching\n")
    (refs / "README.md").write_text("# references\n")
    return refs


class FakeFetcher:
    """
    SourceFetcher serving prepared trees keyed by identity.

    Each fetch copies the tree into a fresh temporary directory, like a
    clone would. Identities in `failing` raise SourceFetchError.
    """

    def __init__(self, trees: dict[str, Path], revisions: dict[str, str] | None = None, failing: set[str] | None = None):
        self.trees = trees
        self.revisions = revisions or {}
        self.failing = failing or set()
        self.fetched: list[Path] = []
        self._identity_of: dict[Path, str] = {}

    def fetch(self, identity: str) -> Path:
        if identity in self.failing or identity not in self.trees:
            raise SourceFetchError(identity)
        tmp = Path(tempfile.mkdtemp(prefix="agent-skills-test-"))
        shutil.copytree(self.trees[identity], tmp, dirs_exist_ok=True)
        self.fetched.append(tmp)
        self._identity_of[tmp] = identity
        return tmp

    def tree_revision(self, tree: Path) -> str:
        return self.revisions.get(self._identity_of.get(tree, ""), "unknown")

    def path_revision(self, tree: Path, relative_paths: list[str]) -> str:
        return self.tree_revision(tree)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo CLI logging config so loggers don't keep a closed captured stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def source_tree(tmp_path):
    """A source repo with three skills, one of which uses references."""
    tree = tmp_path / "source"
    write_skill(
        tree,
        "pdf-tools",
        "pdf-processing",
        description="Process PDF files",
        extra="metadata:\n  trigger: Ask to extract text from a PDF\n",
    )
    (tree / "skills" / "pdf-tools" / "scripts").mkdir()
    (tree / "skills" / "pdf-tools" / "scripts" / "extract.py").write_text("print('pdf')\n")
    write_skill(
        tree,
        "code-review",
        "code-review",
        description="Review code changes",
        body="See references/vcs/vcs-platform-commands.ref.md before posting.",
    )
    write_skill(tree, "git-commit", "git-commit", description="Write commit messages")
    write_references(tree)
    return tree


@pytest.fixture
def settings():
    return AgentSkillsSettings(default_repo="https://example.com/skills.git")


@pytest.fixture
def fetcher(source_tree):
    return FakeFetcher(
        {"https://example.com/skills.git": source_tree},
        revisions={"https://example.com/skills.git": "rev-1"},
    )


@pytest.fixture
def manager(settings, fetcher):
    return SkillsManager(settings, fetcher=fetcher)


@pytest.fixture
def target_dir(tmp_path):
    """Skills install root, e.g. `<project>/.claude/skills`."""
    return tmp_path / "project" / ".claude" / "skills"
