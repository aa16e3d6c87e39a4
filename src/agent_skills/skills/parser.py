"""
SKILL.md Parser

Extracts skill metadata from the YAML frontmatter of a SKILL.md
document. Parsing is pure and fail-soft: anything that is not a
well-formed header with a usable `name` yields None.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import structlog
import yaml

from agent_skills.skills.models import SkillManifest

logger = structlog.get_logger(__name__)

MANIFEST_FILENAME = "SKILL.md"

# Header must open the document (after an optional BOM) and close on a
# line of exactly three dashes.
FRONTMATTER_PATTERN = re.compile(
    r"\A\ufeff?---\r?\n(.*?)\r?\n---(?:\r?\n|\Z)(.*)\Z",
    re.DOTALL,
)


class ManifestLoader(yaml.SafeLoader):
    """
    SafeLoader with YAML 1.2 booleans.

    Only true/false resolve to bool; yes/no/on/off stay strings, so
    `name: yes` is a valid skill name.
    """


ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ManifestLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def parse_yaml_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """
    Split SKILL.md content into its frontmatter mapping and body.

    Returns:
        Tuple of (metadata_dict, body_content). The mapping is None when
        no header block exists, the YAML does not parse, or the block is
        not a mapping.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None, content

    body = match.group(2)
    try:
        parsed = yaml.load(match.group(1), Loader=ManifestLoader)
    except yaml.YAMLError as e:
        logger.debug("Frontmatter YAML parse failed", error=str(e))
        return None, body

    if not isinstance(parsed, dict):
        return None, body

    return parsed, body


def short_description(value: str) -> str:
    """Return the first non-blank line of a description, trimmed."""
    for line in value.split("\n"):
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


def parse_manifest(content: str) -> SkillManifest | None:
    """
    Parse SKILL.md text into a SkillManifest.

    A missing or non-string description does not invalidate the
    manifest; it becomes an empty string.
    """
    metadata, _ = parse_yaml_frontmatter(content)
    if metadata is None:
        return None

    name = metadata.get("name")
    if not isinstance(name, str) or not name.strip():
        return None

    description = metadata.get("description")
    if isinstance(description, str):
        description = short_description(description)
    else:
        description = ""

    trigger = None
    nested = metadata.get("metadata")
    if isinstance(nested, dict) and isinstance(nested.get("trigger"), str):
        trigger = nested["trigger"].strip()

    return SkillManifest(name=name, description=description, trigger=trigger)


def extract_full_description(content: str) -> str:
    """Return the whole trimmed `description` value, or "" if unavailable."""
    metadata, _ = parse_yaml_frontmatter(content)
    if metadata is None:
        return ""
    description = metadata.get("description")
    if not isinstance(description, str):
        return ""
    return description.strip()


def read_manifest_text(skill_dir: Path) -> str | None:
    """Read `<skill_dir>/SKILL.md`, or None if it is absent or unreadable."""
    manifest_path = skill_dir / MANIFEST_FILENAME
    if not manifest_path.is_file():
        return None
    try:
        return manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read SKILL.md", path=str(manifest_path), error=str(e))
        return None


def load_manifest(skill_dir: Path) -> SkillManifest | None:
    """Load and parse the manifest of a skill directory."""
    content = read_manifest_text(skill_dir)
    if content is None:
        return None

    manifest = parse_manifest(content)
    if manifest is None:
        logger.debug("Skipping skill with invalid frontmatter", path=str(skill_dir))
    return manifest
