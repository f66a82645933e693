"""
Snapshot persistence for tenant configurations.

The whole tenant store is serialized as a single JSON array and rewritten
on every change. An environment-supplied blob of the same shape can stand
in for the file on hosts without writable storage; it is never written back.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Snapshot could not be read or written."""


@runtime_checkable
class SnapshotBackend(Protocol):
    """Protocol for whole-store snapshot persistence."""

    writable: bool

    def load(self) -> Optional[List[Dict[str, Any]]]:
        """Return the stored entries, or None when no snapshot exists."""
        ...

    def save(self, entries: List[Dict[str, Any]]) -> None:
        """Replace the stored snapshot with ``entries``."""
        ...


def _parse(raw: str, source: str) -> List[Dict[str, Any]]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Invalid JSON in {source}: {e}") from e
    if not isinstance(data, list):
        raise PersistenceError(f"Snapshot in {source} is not a JSON array")
    return [entry for entry in data if isinstance(entry, dict)]


class FileSnapshot:
    """JSON file snapshot, rewritten wholesale on save."""

    def __init__(self, path: str, read_only: bool = False):
        self.path = Path(path)
        self.read_only = read_only

    @property
    def writable(self) -> bool:
        return not self.read_only

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        return _parse(raw, str(self.path))

    def save(self, entries: List[Dict[str, Any]]) -> None:
        if self.read_only:
            logger.info("Snapshot is read-only, keeping tenant configs in memory only")
            return
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        logger.info(f"Saved {len(entries)} chatbot configuration(s) to {self.path}")


class EnvSnapshot:
    """Load-only snapshot taken from an environment variable."""

    writable = False

    def __init__(self, raw_json: Optional[str], source: str = "CHATBOT_CONFIGS"):
        self.raw_json = raw_json
        self.source = source

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if not self.raw_json:
            return None
        return _parse(self.raw_json, self.source)

    def save(self, entries: List[Dict[str, Any]]) -> None:
        logger.debug(f"{self.source} snapshot is load-only, skipping save")


class ChainedSnapshot:
    """
    Environment snapshot first, file snapshot as fallback.

    Saves always go to the file backend.
    """

    def __init__(self, env: EnvSnapshot, file: FileSnapshot):
        self.env = env
        self.file = file

    @property
    def writable(self) -> bool:
        return self.file.writable

    def load(self) -> Optional[List[Dict[str, Any]]]:
        try:
            entries = self.env.load()
        except PersistenceError as e:
            logger.error(f"Error loading tenant configs from environment: {e}")
            entries = None
        if entries is not None:
            logger.info(f"Loaded {len(entries)} chatbot(s) from environment")
            return entries
        return self.file.load()

    def save(self, entries: List[Dict[str, Any]]) -> None:
        self.file.save(entries)


def build_snapshot(settings) -> ChainedSnapshot:
    """Create the snapshot backend described by settings."""
    return ChainedSnapshot(
        env=EnvSnapshot(settings.chatbot_configs),
        file=FileSnapshot(settings.snapshot_path, read_only=settings.snapshot_is_read_only),
    )
