"""
Lock Ledger Persistence

One `.agent-skills-lock.json` per target directory records which
version of each skill was installed from which source.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from agent_skills.skills.models import LockEntry, LockLedger

logger = structlog.get_logger(__name__)

LOCK_FILENAME = ".agent-skills-lock.json"


def lock_path(target_dir: Path) -> Path:
    return target_dir / LOCK_FILENAME


def read_ledger(target_dir: Path) -> LockLedger:
    """
    Read the ledger for a target directory.

    Missing or unreadable files, and files without a `skills` mapping,
    yield an empty ledger. Entries are validated one by one; an invalid
    entry is dropped with a warning and the rest are kept.
    """
    path = lock_path(target_dir)
    if not path.is_file():
        return LockLedger()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable lock file", path=str(path), error=str(e))
        return LockLedger()

    raw_entries = data.get("skills") if isinstance(data, dict) else None
    if not isinstance(raw_entries, dict):
        logger.warning("Ignoring lock file without a skills mapping", path=str(path))
        return LockLedger()

    ledger = LockLedger()
    for name, raw in raw_entries.items():
        try:
            ledger.entries[name] = LockEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropping invalid lock entry", path=str(path), skill=name, error=str(e))
    return ledger


def write_ledger(target_dir: Path, ledger: LockLedger) -> Path:
    """Serialize the ledger with sorted keys, replacing any existing file."""
    path = lock_path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    data = ledger.model_dump(mode="json", by_alias=True)
    path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.debug("Wrote lock file", path=str(path), entries=len(ledger.entries))
    return path
