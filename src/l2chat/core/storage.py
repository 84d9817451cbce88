"""
File-backed records under the per-user application directory.

Every record is read and written whole. Missing records raise
``RecordNotFound`` so callers can fall back to defaults.
"""
import json
import logging
from enum import Enum
from importlib import resources
from pathlib import Path

from l2chat.models import Turn, UsageStats

logger = logging.getLogger(__name__)

DATA_DIR = "data"


class Record(Enum):
    SYSTEM = "system.md"
    CONVERSATION = "conversations/conversation.json"
    STATS = "stats.json"


class StorageError(Exception):
    pass


class RecordNotFound(StorageError):
    """The record has never been written. Not a failure."""


class MalformedRecord(StorageError):
    """The record exists but its content could not be parsed."""


def default_system_prompt() -> str:
    return resources.files("l2chat.resources").joinpath("system.md").read_text(encoding="utf-8")


class Store:
    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path(self, record: Record) -> Path:
        return self.root / record.value

    def exists(self, record: Record) -> bool:
        return self.path(record).is_file()

    def read(self, record: Record) -> bytes:
        path = self.path(record)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise RecordNotFound(record.value) from None

    def write(self, record: Record, data: bytes) -> None:
        _write_file(self.path(record), data)

    # --- named blobs (lexicon, user files) -------------------------------

    @property
    def data_dir(self) -> Path:
        return self.root / DATA_DIR

    def named_path(self, name: str) -> Path:
        if not name or not name.strip():
            raise ValueError("data file name is required")
        base = self.data_dir.resolve()
        path = (base / name).resolve()
        if path == base or not path.is_relative_to(base):
            raise ValueError(f"data file name escapes the data directory: {name!r}")
        return path

    def read_named(self, name: str) -> bytes:
        try:
            return self.named_path(name).read_bytes()
        except FileNotFoundError:
            raise RecordNotFound(f"{DATA_DIR}/{name}") from None

    def write_named(self, name: str, data: bytes) -> None:
        _write_file(self.named_path(name), data)

    # --- typed records ---------------------------------------------------

    def read_history(self) -> list[Turn]:
        raw = self.read(Record.CONVERSATION)
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("conversation must be a JSON array")
            return [Turn.from_dict(item) for item in items]
        except ValueError as e:
            raise MalformedRecord(f"{Record.CONVERSATION.value}: {e}") from e

    def write_history(self, history: list[Turn]) -> None:
        data = json.dumps([turn.to_dict() for turn in history], ensure_ascii=False)
        self.write(Record.CONVERSATION, data.encode("utf-8"))

    def read_stats(self) -> UsageStats:
        raw = self.read(Record.STATS)
        try:
            return UsageStats.from_dict(json.loads(raw))
        except ValueError as e:
            raise MalformedRecord(f"{Record.STATS.value}: {e}") from e

    def write_stats(self, stats: UsageStats) -> None:
        self.write(Record.STATS, json.dumps(stats.to_dict()).encode("utf-8"))

    def read_system(self) -> str:
        """Read the system prompt, seeding it from the bundled template on first use."""
        if not self.exists(Record.SYSTEM):
            logger.info("seeding %s from bundled template", self.path(Record.SYSTEM))
            self.write(Record.SYSTEM, default_system_prompt().encode("utf-8"))
        return self.read(Record.SYSTEM).decode("utf-8")


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
