"""Configuration and the agent registry."""

from agent_skills.core.agents import AGENTS, AgentConfig, find_agent, install_dir
from agent_skills.core.config import AgentSkillsSettings, ProjectConfig

__all__ = [
    "AGENTS",
    "AgentConfig",
    "AgentSkillsSettings",
    "ProjectConfig",
    "find_agent",
    "install_dir",
]
