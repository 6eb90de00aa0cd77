"""Record of the last completed check.

The state file is a small JSON object::

    {"lastSync": "<ISO-8601 UTC>", "version": {"local": ..., "remote": ...},
     "hasChanges": true, "breaking": false}

Only ``lastSync`` is read back; the rest is there for people inspecting the file.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from schema_sync.schema.models import DiffReport


def read_last_sync(path: Path) -> Optional[str]:
    """Return the recorded last-sync timestamp, or None if there is none.

    An unreadable or malformed state file is logged and treated as "never".
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unreadable sync state {path}: {e}")
        return None

    last_sync = data.get("lastSync") if isinstance(data, dict) else None
    if not isinstance(last_sync, str):
        logger.warning(f"Sync state {path} has no lastSync timestamp")
        return None
    return last_sync


def write_sync_state(path: Path, report: DiffReport, timestamp: Optional[str] = None) -> str:
    """Record a completed check and return the timestamp written."""
    timestamp = timestamp or datetime.now(timezone.utc).isoformat()
    state = {
        "lastSync": timestamp,
        "version": {"local": report.versions.local, "remote": report.versions.remote},
        "hasChanges": report.has_changes,
        "breaking": report.breaking,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, indent=2), encoding="utf-8")
    logger.debug(f"Sync state written to {path}")
    return timestamp
