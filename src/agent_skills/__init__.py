"""
agent-skills

Package manager for Agent Skills: resolves skill packages from one or
more source repositories and installs, updates and removes them in the
skill directories of AI coding assistants.
"""

# Skills
from agent_skills.skills import (
    ReferenceSelection,
    SkillCandidate,
    SkillsError,
    SkillsManager,
)

# Core
from agent_skills.core import AGENTS, AgentConfig, AgentSkillsSettings, ProjectConfig

__version__ = "0.1.0"
__all__ = [
    # Skills
    "SkillsManager",
    "SkillCandidate",
    "ReferenceSelection",
    "SkillsError",
    # Core
    "AGENTS",
    "AgentConfig",
    "AgentSkillsSettings",
    "ProjectConfig",
    # Version
    "__version__",
]
