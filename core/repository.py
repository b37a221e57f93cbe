"""
Ledger repositories: durable load/save of a LedgerSnapshot.

JsonFileRepository mirrors on-device key-value storage: one JSON document
whose entries are keyed by name, with the ledger stored under a fixed key.
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from core.config_manager import config
from core.logger import get_logger
from core.models import LedgerSnapshot

logger = get_logger("repository")


class LedgerRepository(ABC):

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        pass


class InMemoryRepository(LedgerRepository):
    """Keeps a serialized copy so callers never share mutable state with it."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._data: Dict[str, Any] = (snapshot or LedgerSnapshot()).to_dict()
        self.save_count = 0

    def load(self) -> LedgerSnapshot:
        return LedgerSnapshot.from_dict(json.loads(json.dumps(self._data)))

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._data = snapshot.to_dict()
        self.save_count += 1


class JsonFileRepository(LedgerRepository):
    """Snapshot persisted as structured text under a fixed key of a JSON file."""

    def __init__(self, path: Path, key: Optional[str] = None):
        self._path = Path(path)
        self._key = key or config.STORAGE_KEY

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            backup = self._path.with_suffix(".corrupt" + self._path.suffix)
            logger.error(f"Corrupt ledger file {self._path} ({e}), moved to {backup.name}")
            self._path.replace(backup)
            return {}
        except OSError as e:
            logger.error(f"Cannot read ledger file {self._path}: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Ledger file {self._path} is not a key-value document, ignoring")
            return {}
        return document

    def load(self) -> LedgerSnapshot:
        raw = self._read_document().get(self._key)
        if raw is None:
            return LedgerSnapshot()
        if isinstance(raw, str):
            # value stored as serialized text, the way browser storage keeps it
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt value under key '{self._key}': {e}")
                return LedgerSnapshot()
        return LedgerSnapshot.from_dict(raw)

    def save(self, snapshot: LedgerSnapshot) -> None:
        document = self._read_document()
        document[self._key] = snapshot.to_dict()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self._path)
