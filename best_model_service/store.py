"""
Directory-backed storage for model records.

Each record lives in ``<root>/<name>.json`` as
``{"name": ..., "score": ..., "data": ...}``. The file stem is the record's
name; ``list_all`` re-derives names from stems so that a record written
under a name always reloads under that same name.
"""

import json
import logging
import math
import os
import tempfile
from pathlib import Path

from best_model_service.models import Record

logger = logging.getLogger(__name__)

SUFFIX = ".json"


class StorageError(OSError):
    """The data directory could not be listed or a record could not be written."""


class RecordParseError(ValueError):
    """A stored record is malformed."""


class InvalidRecordName(ValueError):
    """A record name that cannot be used as a file stem."""


def check_name(name: str) -> str:
    if not name or name.startswith("."):
        raise InvalidRecordName(f"invalid record name: {name!r}")
    if "/" in name or "\\" in name or "\0" in name or os.sep in name:
        raise InvalidRecordName(f"invalid record name: {name!r}")
    return name


def parse_record(name: str, text: str) -> Record:
    """Turn the text of ``<name>.json`` into a Record, or raise RecordParseError."""
    try:
        raw = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise RecordParseError(f"{name}: invalid JSON ({e})") from e
    if not isinstance(raw, dict):
        raise RecordParseError(f"{name}: expected a JSON object")
    score = raw.get("score")
    # bool is an int subclass but never a score
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise RecordParseError(f"{name}: missing or non-numeric score")
    try:
        finite = math.isfinite(score)
    except OverflowError as e:
        raise RecordParseError(f"{name}: score out of range") from e
    if not finite:
        raise RecordParseError(f"{name}: score is not finite")
    return Record(name=name, score=score, data=raw.get("data"))


class RecordStore:
    def __init__(self, root):
        self.root = Path(root)

    def ensure_dir(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create data directory {self.root}: {e}") from e

    def path_for(self, name: str) -> Path:
        return self.root / f"{check_name(name)}{SUFFIX}"

    def load(self, name: str) -> Record:
        path = self.path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise RecordParseError(f"{name}: not UTF-8 ({e})") from e
        except OSError as e:
            raise StorageError(f"cannot read {path}: {e}") from e
        return parse_record(name, text)

    def list_all(self) -> list[Record]:
        """
        Load every parseable record in the data directory.

        Entries are visited in sorted filename order. Malformed or unreadable
        files are logged and skipped so that one bad record cannot block
        startup; only a failure to list the directory itself is raised.
        """
        self.ensure_dir()
        try:
            entries = sorted(self.root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise StorageError(f"cannot list {self.root}: {e}") from e

        records = []
        for entry in entries:
            if entry.suffix != SUFFIX or entry.name.startswith("."):
                continue
            if not entry.is_file():
                continue
            try:
                records.append(self.load(entry.stem))
            except (RecordParseError, StorageError, InvalidRecordName) as e:
                logger.warning("Error reading model %s: %s", entry.name, e)
        return records

    def write(self, record: Record) -> None:
        """
        Persist ``record`` under its name, replacing any previous version.

        The JSON is written to a hidden temp file in the same directory,
        fsynced, then moved over the target with ``os.replace`` so readers see
        either the old file or the new one, never a partial write.
        """
        target = self.path_for(record.name)
        self.ensure_dir()
        body = json.dumps(record.model_dump(), indent=2, ensure_ascii=False)

        try:
            fd, tmp = tempfile.mkstemp(prefix=f".{record.name}.", suffix=".tmp", dir=self.root)
        except OSError as e:
            raise StorageError(f"cannot write {target}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, target)
        except OSError as e:
            self._discard(tmp)
            raise StorageError(f"cannot write {target}: {e}") from e

    @staticmethod
    def _discard(tmp: str) -> None:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("could not remove temp file %s: %s", tmp, e)
