"""
Supported AI coding agents.

Static, read-only table mapping each agent's CLI flag to its
project-level and global skill directories.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from agent_skills.skills.errors import UnknownAgentError


@dataclass(frozen=True)
class AgentConfig:
    """Where one agent looks for skills."""
    name: str
    flag: str
    project_path: str  # relative to the project root
    global_path: str   # relative to the home directory


AGENTS: tuple[AgentConfig, ...] = (
    # Popular
    AgentConfig("Cursor", "cursor", ".agents/skills", ".cursor/skills"),
    AgentConfig("Claude Code", "claude-code", ".claude/skills", ".claude/skills"),
    AgentConfig("GitHub Copilot", "github-copilot", ".agents/skills", ".copilot/skills"),
    AgentConfig("Gemini CLI", "gemini-cli", ".agents/skills", ".gemini/skills"),
    AgentConfig("Antigravity", "antigravity", ".agent/skills", ".gemini/antigravity/skills"),
    AgentConfig("Codex", "codex", ".agents/skills", ".codex/skills"),
    AgentConfig("Windsurf", "windsurf", ".windsurf/skills", ".codeium/windsurf/skills"),
    AgentConfig("Roo Code", "roo", ".roo/skills", ".roo/skills"),
    AgentConfig("Cline", "cline", ".cline/skills", ".cline/skills"),
    # Others
    AgentConfig("Amp", "amp", ".agents/skills", ".config/agents/skills"),
    AgentConfig("Augment", "augment", ".augment/skills", ".augment/skills"),
    AgentConfig("CodeBuddy", "codebuddy", ".codebuddy/skills", ".codebuddy/skills"),
    AgentConfig("Command Code", "command-code", ".commandcode/skills", ".commandcode/skills"),
    AgentConfig("Continue", "continue", ".continue/skills", ".continue/skills"),
    AgentConfig("Cortex Code", "cortex", ".cortex/skills", ".snowflake/cortex/skills"),
    AgentConfig("Crush", "crush", ".crush/skills", ".config/crush/skills"),
    AgentConfig("Droid", "droid", ".factory/skills", ".factory/skills"),
    AgentConfig("Goose", "goose", ".goose/skills", ".config/goose/skills"),
    AgentConfig("iFlow CLI", "iflow-cli", ".iflow/skills", ".iflow/skills"),
    AgentConfig("Junie", "junie", ".junie/skills", ".junie/skills"),
    AgentConfig("Kilo Code", "kilo", ".kilocode/skills", ".kilocode/skills"),
    AgentConfig("Kimi Code CLI", "kimi-cli", ".agents/skills", ".config/agents/skills"),
    AgentConfig("Kiro CLI", "kiro-cli", ".kiro/skills", ".kiro/skills"),
    AgentConfig("Kode", "kode", ".kode/skills", ".kode/skills"),
    AgentConfig("MCPJam", "mcpjam", ".mcpjam/skills", ".mcpjam/skills"),
    AgentConfig("Mistral Vibe", "mistral-vibe", ".vibe/skills", ".vibe/skills"),
    AgentConfig("Mux", "mux", ".mux/skills", ".mux/skills"),
    AgentConfig("Neovate", "neovate", ".neovate/skills", ".neovate/skills"),
    AgentConfig("OpenClaw", "openclaw", "skills", ".openclaw/skills"),
    AgentConfig("OpenCode", "opencode", ".agents/skills", ".config/opencode/skills"),
    AgentConfig("OpenHands", "openhands", ".openhands/skills", ".openhands/skills"),
    AgentConfig("Pi", "pi", ".pi/skills", ".pi/agent/skills"),
    AgentConfig("Pochi", "pochi", ".pochi/skills", ".pochi/skills"),
    AgentConfig("Qoder", "qoder", ".qoder/skills", ".qoder/skills"),
    AgentConfig("Qwen Code", "qwen-code", ".qwen/skills", ".qwen/skills"),
    AgentConfig("Replit", "replit", ".agents/skills", ".config/agents/skills"),
    AgentConfig("Trae", "trae", ".trae/skills", ".trae/skills"),
    AgentConfig("Trae CN", "trae-cn", ".trae/skills", ".trae-cn/skills"),
    AgentConfig("Universal", "universal", ".agents/skills", ".config/agents/skills"),
    AgentConfig("Zencoder", "zencoder", ".zencoder/skills", ".zencoder/skills"),
    AgentConfig("AdaL", "adal", ".adal/skills", ".adal/skills"),
)

POPULAR_AGENT_FLAGS = (
    "cursor",
    "claude-code",
    "github-copilot",
    "gemini-cli",
    "antigravity",
    "codex",
    "windsurf",
    "roo",
    "cline",
)


def agent_flags() -> list[str]:
    return [agent.flag for agent in AGENTS]


def find_agent(flag: str) -> AgentConfig | None:
    return next((agent for agent in AGENTS if agent.flag == flag), None)


def require_agent(flag: str) -> AgentConfig:
    agent = find_agent(flag)
    if agent is None:
        raise UnknownAgentError(flag, agent_flags())
    return agent


def install_dir(
    agent: AgentConfig,
    global_: bool = False,
    cwd: Path | None = None,
    home: Path | None = None,
) -> Path:
    """Resolve the skills install root for an agent and scope."""
    if global_:
        return (home or Path.home()) / agent.global_path
    return Path(os.path.abspath((cwd or Path.cwd()) / agent.project_path))


def unique_install_dirs(
    global_: bool = False,
    cwd: Path | None = None,
    home: Path | None = None,
) -> list[tuple[AgentConfig, Path]]:
    """One (agent, dir) pair per distinct install root, first agent wins."""
    seen: set[Path] = set()
    pairs = []
    for agent in AGENTS:
        path = install_dir(agent, global_, cwd=cwd, home=home)
        if path in seen:
            continue
        seen.add(path)
        pairs.append((agent, path))
    return pairs
