from __future__ import annotations

import os
import tempfile
import threading

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from src import config
from src.access.errors import StoreCorruptError, StoreUnreadableError, StoreWriteError
from src.access.record import EmbeddingRecord
from src.utils.log import get_logger
from src.utils.serializer import dump_records, parse_records

logger = get_logger(__name__)


@dataclass
class StoreConfig:
    # JSON file holding every enrolled identity.
    path: str = config.DATABASE
    # Pretty-print indent of the rewritten file.
    indent: int = 2
    # Raise StoreCorruptError instead of falling back to an empty store.
    strict: bool = False


class RecordStore:
    """Append-only identity store backed by a single JSON file.

    Every `load()` re-reads the whole file and every `append()` rewrites it in
    full (read all, add one, write all), keeping the file format of earlier runs.
    A re-entrant lock serializes load/append inside one process. Separate
    processes writing the same file are not coordinated: the last rewrite wins.
    """

    def __init__(self, cfg: Optional[StoreConfig] = None):
        self.config = cfg or StoreConfig()
        self.path = Path(self.config.path)
        self._lock = threading.RLock()
        self._records: List[EmbeddingRecord] = []

    @property
    def records(self) -> List[EmbeddingRecord]:
        """Snapshot of the records seen by the last load/append."""
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        return len(self.load())

    def _read_text(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            # Removed between exists() and open(): same as never created.
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreUnreadableError(self.path, f"cannot read store ({e})") from e

    def load(self) -> List[EmbeddingRecord]:
        """Read all records in stored order.

        Missing file -> []. Unparsable content -> [] with a warning, or
        StoreCorruptError when `strict` is set. Unreadable file -> StoreUnreadableError.
        """
        with self._lock:
            text = self._read_text()
            if text is None:
                logger.debug(f"store file not found, starting empty: {self.path}")
                self._records = []
                return []
            try:
                records = parse_records(text)
            except (ValueError, RecursionError) as e:
                # RecursionError: nesting deeper than the JSON decoder allows.
                if self.config.strict:
                    raise StoreCorruptError(self.path, f"store content is invalid ({e})") from e
                # The next append rewrites the file without the unreadable data.
                logger.warning(f"store file is corrupt, treating it as empty ({e}): {self.path}")
                records = []
            self._records = records
            return list(records)

    def append(self, record: EmbeddingRecord) -> None:
        """Persist `record` after the current contents by rewriting the file."""
        with self._lock:
            records = self.load()
            if any(r.id == record.id for r in records):
                raise ValueError(f"record id already stored: {record.id}")
            records.append(record)
            self._write(records)
            self._records = records
            logger.debug(f"stored record {record.id} ({len(records)} total)")

    def _write(self, records: List[EmbeddingRecord]) -> None:
        text = dump_records(records, indent=self.config.indent)
        tmp_name = None
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise StoreWriteError(self.path, f"cannot write store ({e})") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
