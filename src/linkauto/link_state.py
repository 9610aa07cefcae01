"""Track linked inputs to avoid re-linking unchanged documents."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

log = logging.getLogger(__name__)

_DEFAULT_STATE_DIR = Path.home() / ".local" / "share" / "linkauto"
_DEFAULT_STATE_PATH = _DEFAULT_STATE_DIR / "link_state.json"


def content_digest(*parts: bytes) -> str:
    """SHA-256 over the input bytes and the definition table it was linked with."""
    h = hashlib.sha256()
    for part in parts:
        h.update(hashlib.sha256(part).digest())
    return h.hexdigest()


class LinkState:
    """Persistent state tracking which inputs have been linked."""

    def __init__(self, state_path: Path | None = None):
        self.path = state_path or _DEFAULT_STATE_PATH
        self._state: dict[str, dict] = {}
        self._load()

    def _load(self) -> None:
        if self.path.exists():
            try:
                self._state = json.loads(self.path.read_text(encoding="utf-8"))
                log.debug("Loaded link state with %d entries", len(self._state))
            except (json.JSONDecodeError, OSError):
                log.warning("Failed to load link state, starting fresh")
                self._state = {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._state, indent=2, default=str),
            encoding="utf-8",
        )

    def needs_link(self, source: Path, digest: str) -> bool:
        """Check if an input changed (or the definitions did) since last linked."""
        entry = self._state.get(str(source))
        if entry is None:
            return True
        return entry.get("digest", "") != digest

    def record_link(self, source: Path, digest: str, output: Path) -> None:
        """Record that an input has been linked."""
        self._state[str(source)] = {
            "digest": digest,
            "output": str(output),
            "linked_at": datetime.now(tz=timezone.utc).isoformat(),
        }
        self._save()

    def get_previous_output(self, source: Path) -> str | None:
        entry = self._state.get(str(source))
        if entry:
            return entry.get("output")
        return None

    def clear(self) -> None:
        """Forget everything, forcing a full re-link."""
        self._state = {}
        self._save()
