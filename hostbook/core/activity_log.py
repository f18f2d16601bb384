# hostbook activity log
# JSONL event log for add/connect/migrate activity

import json
from datetime import datetime
from pathlib import Path
from typing import Optional


class ActivityLog:
    """
    Append-only JSONL activity log.

    Features:
    - One JSON object per line
    - Flush after each entry
    - Write failures are swallowed so logging never interrupts a session
    """

    def __init__(self, path: Optional[Path], enabled: bool = True):
        """
        Initialize the activity log.

        Args:
            path: JSONL file to append to
            enabled: When False every call is a no-op
        """
        self.path = Path(path) if path else None
        self.enabled = enabled and self.path is not None

    @classmethod
    def from_config(cls, config) -> "ActivityLog":
        return cls(config.log_file, enabled=config.log_enabled)

    def _write(self, event: str, **kwargs) -> None:
        """Write a log entry."""
        if not self.enabled:
            return

        entry = {
            "ts": datetime.now().isoformat(),
            "event": event,
            **kwargs
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
                f.flush()
        except OSError:
            # An unwritable log must not abort a connection
            pass

    def profile_added(self, name: str, target: str) -> None:
        self._write("profile_added", profile=name, target=target)

    def state(self, state: str, profile: str = "") -> None:
        """Log a workflow state transition."""
        self._write("state", state=state, profile=profile)

    def key_repaired(self, path: Path) -> None:
        self._write("key_repaired", path=str(path))

    def staging(self, profile: str, entries: int, remote_dir: str, ok: bool) -> None:
        self._write("staging", profile=profile, entries=entries, remote_dir=remote_dir, ok=ok)

    def session_end(self, profile: str, exit_code: int) -> None:
        self._write("session_end", profile=profile, exit_code=exit_code)

    def error(self, kind: str, message: str, profile: str = "") -> None:
        self._write("error", kind=kind, message=message, profile=profile)
