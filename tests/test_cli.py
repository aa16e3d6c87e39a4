"""
Tests for the CLI, project configuration and agent registry.
"""

import json

import pytest
from typer.testing import CliRunner

from conftest import write_skill

from agent_skills.cli import app
from agent_skills.core.agents import AGENTS, find_agent, install_dir, require_agent, unique_install_dirs
from agent_skills.core.config import (
    AgentSkillsSettings,
    ProjectConfig,
    load_project_config,
    resolve_repos,
    save_project_config,
)
from agent_skills.skills.errors import UnknownAgentError
from agent_skills.skills.lockfile import read_ledger

REPO = "https://example.com/skills.git"

runner = CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Run commands from an empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(root)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return root


def invoke(manager, *args, input=None):
    return runner.invoke(app, list(args), obj=manager, input=input)


# ============================================================================
# Test Agent Registry
# ============================================================================

class TestAgents:
    """Tests for the static agent table."""

    def test_flags_are_unique(self):
        flags = [a.flag for a in AGENTS]
        assert len(flags) == len(set(flags))

    def test_lookup(self):
        assert find_agent("claude-code").project_path == ".claude/skills"
        assert find_agent("nope") is None
        with pytest.raises(UnknownAgentError) as exc:
            require_agent("nope")
        assert "cursor" in str(exc.value)

    def test_install_dir(self, tmp_path):
        agent = find_agent("windsurf")
        assert install_dir(agent, cwd=tmp_path) == tmp_path / ".windsurf" / "skills"
        assert install_dir(agent, global_=True, home=tmp_path) == tmp_path / ".codeium" / "windsurf" / "skills"

    def test_unique_install_dirs(self, tmp_path):
        pairs = unique_install_dirs(cwd=tmp_path)
        paths = [p for _, p in pairs]

        assert len(paths) == len(set(paths))
        assert pairs[0][0].flag == "cursor"
        assert all(a.flag != "github-copilot" for a, _ in pairs)


# ============================================================================
# Test Configuration
# ============================================================================

class TestConfig:
    """Tests for settings and the project config file."""

    def test_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("AGENT_SKILLS_DEFAULT_REPO", "https://example.com/env.git")
        monkeypatch.setenv("AGENT_SKILLS_CLONE_DEPTH", "5")

        settings = AgentSkillsSettings()

        assert settings.default_repo == "https://example.com/env.git"
        assert settings.clone_depth == 5

    def test_round_trip(self, tmp_path, settings):
        config = ProjectConfig(default_agent="cursor", techs=["python"])
        path = save_project_config(settings, config, cwd=tmp_path)

        assert json.loads(path.read_text()) == {"defaultAgent": "cursor", "techs": ["python"]}
        assert load_project_config(settings, cwd=tmp_path) == config

    @pytest.mark.parametrize("content", ["{broken", '{"repos": "not-a-list"}'])
    def test_malformed_config_is_ignored(self, tmp_path, settings, content):
        (tmp_path / settings.config_filename).write_text(content)
        assert load_project_config(settings, cwd=tmp_path) is None

    def test_missing_config(self, tmp_path, settings):
        assert load_project_config(settings, cwd=tmp_path) is None

    def test_resolve_repos_priority(self, settings):
        project = ProjectConfig(repos=["a", "b"])

        assert resolve_repos(settings, "flag", project) == ["flag"]
        assert resolve_repos(settings, None, project) == ["a", "b"]
        assert resolve_repos(settings, None, ProjectConfig(repos=[])) == [REPO]
        assert resolve_repos(settings, None, None) == [REPO]


# ============================================================================
# Test Commands
# ============================================================================

class TestCommands:
    """End-to-end command tests against a fake source."""

    def test_add_named_skill(self, manager, project):
        result = invoke(manager, "add", "pdf-processing", "--tool", "claude-code")

        assert result.exit_code == 0, result.output
        assert "pdf-processing" in result.output
        assert "Trigger: Ask to extract text from a PDF" in result.output
        target = project / ".claude" / "skills"
        assert (target / "pdf-tools" / "SKILL.md").exists()
        assert read_ledger(target).get("pdf-processing").version == "rev-1"

    def test_add_uses_config_defaults(self, manager, project):
        (project / ".agent-skills.json").write_text(
            json.dumps({"defaultAgent": "cline", "techs": ["go"], "vcs": "gitlab"})
        )

        result = invoke(manager, "add", "code-review")

        assert result.exit_code == 0, result.output
        refs = project / ".cline" / "references"
        assert (refs / "go").is_dir()
        assert not (refs / "python").exists()
        assert (refs / "vcs" / "code-review-posting-gitlab.ref.md").exists()

    def test_add_prompts_for_references(self, manager, project):
        result = invoke(manager, "add", "code-review", "-t", "roo", input="2\n1\n")

        assert result.exit_code == 0, result.output
        refs = project / ".roo" / "references"
        assert (refs / "python").is_dir()
        assert not (refs / "go").exists()
        assert (refs / "vcs" / "code-review-posting-github.ref.md").exists()

    def test_add_interactive_selection(self, manager, project):
        result = invoke(manager, "add", "-t", "roo", input="2,3\n")

        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".roo" / "skills").iterdir() if p.is_dir())
        assert installed == ["git-commit", "pdf-tools"]

    def test_add_global(self, manager, project, tmp_path):
        result = invoke(manager, "add", "git-commit", "-t", "codex", "--global")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "home" / ".codex" / "skills" / "git-commit").is_dir()
        assert not (project / ".agents").exists()

    def test_add_unknown_skill_fails(self, manager, project, fetcher):
        result = invoke(manager, "add", "nope", "-t", "claude-code")

        assert result.exit_code == 1
        assert not (project / ".claude").exists()
        assert all(not tree.exists() for tree in fetcher.fetched)

    def test_add_unknown_agent_fails(self, manager, project):
        result = invoke(manager, "add", "git-commit", "-t", "emacs")
        assert result.exit_code == 1

    def test_remove(self, manager, project):
        invoke(manager, "add", "code-review", "git-commit", "-t", "claude-code", "--tech", "python", "--vcs", "github")

        result = invoke(manager, "remove", "code-review", "-t", "claude-code")

        assert result.exit_code == 0, result.output
        assert "Cleaned up unused references" in result.output
        assert not (project / ".claude" / "references").exists()
        assert (project / ".claude" / "skills" / "git-commit").is_dir()

    def test_remove_not_installed_fails(self, manager, project):
        invoke(manager, "add", "git-commit", "-t", "claude-code")

        result = invoke(manager, "rm", "pdf-tools", "-t", "claude-code")

        assert result.exit_code == 1

    def test_remove_resolves_each_name_once(self, manager, project):
        target = project / ".claude" / "skills"
        write_skill(target.parent, "aaa", "alpha")
        write_skill(target.parent, "alpha", "beta")
        write_skill(target.parent, "beta", "gamma")

        result = invoke(manager, "remove", "beta", "-t", "claude-code")

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in target.iterdir() if p.is_dir()) == ["aaa", "beta"]

    def test_remove_interactive_selection(self, manager, project):
        target = project / ".claude" / "skills"
        write_skill(target.parent, "aaa", "alpha")
        write_skill(target.parent, "alpha", "beta")
        write_skill(target.parent, "beta", "gamma")

        result = invoke(manager, "remove", "-t", "claude-code", input="3\n")

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in target.iterdir() if p.is_dir()) == ["aaa", "alpha"]

    def test_remove_with_nothing_installed(self, manager, project):
        result = invoke(manager, "remove", "git-commit", "-t", "claude-code")

        assert result.exit_code == 0
        assert "No skills installed" in result.output

    def test_list_local(self, manager, project):
        invoke(manager, "add", "git-commit", "-t", "claude-code")

        result = invoke(manager, "list")

        assert result.exit_code == 0, result.output
        assert "Claude Code" in result.output
        assert "git-commit" in result.output
        assert "Total: 1" in result.output

    def test_markup_in_skill_text_is_printed_literally(self, manager, project, source_tree):
        write_skill(
            project / ".claude",
            "code-blocks",
            "code-blocks",
            description="'Closes [/code] blocks'",
        )
        write_skill(source_tree, "fmt", "'[bold]fmt'", description="'Formats [red]everything'")

        result = invoke(manager, "list", "--tool", "claude-code")
        assert result.exit_code == 0, result.output
        assert "Closes [/code] blocks" in result.output

        result = invoke(manager, "list", "--remote")
        assert result.exit_code == 0, result.output
        assert "Formats [red]everything" in result.output

        result = invoke(manager, "search", "[/code]")
        assert result.exit_code == 0, result.output
        assert 'No skills found matching "[/code]"' in result.output

        result = invoke(manager, "add", "-t", "roo", input="\n")
        assert result.exit_code == 0, result.output
        assert "[bold]fmt" in result.output

    def test_list_remote(self, manager, project):
        result = invoke(manager, "ls", "--remote")

        assert result.exit_code == 0, result.output
        assert "pdf-processing" in result.output
        assert "Total: 3" in result.output

    def test_search(self, manager, project):
        result = invoke(manager, "search", "commit")

        assert result.exit_code == 0, result.output
        assert "git-commit" in result.output
        assert "pdf-processing" not in result.output

    def test_info(self, manager, project):
        result = invoke(manager, "info", "pdf-tools")

        assert result.exit_code == 0, result.output
        assert "Process PDF files" in result.output
        assert "scripts/extract.py" in result.output

    def test_update(self, manager, fetcher, project):
        invoke(manager, "add", "git-commit", "-t", "claude-code")

        result = invoke(manager, "update")
        assert result.exit_code == 0, result.output
        assert "already up to date" in result.output

        fetcher.revisions[REPO] = "rev-2"
        result = invoke(manager, "update")
        assert result.exit_code == 0, result.output
        assert "Updated 1 skill(s)" in result.output
        assert read_ledger(project / ".claude" / "skills").get("git-commit").version == "rev-2"

    def test_fetch_failure_exits_non_zero(self, manager, project):
        result = invoke(manager, "list", "--remote", "--repo", "https://example.com/missing.git")
        assert result.exit_code == 1

    def test_init(self, manager, project):
        result = invoke(manager, "init", input="2\nhttps://example.com/a.git, https://example.com/b.git\n")

        assert result.exit_code == 0, result.output
        data = json.loads((project / ".agent-skills.json").read_text())
        assert data == {
            "defaultAgent": "claude-code",
            "repos": ["https://example.com/a.git", "https://example.com/b.git"],
        }
