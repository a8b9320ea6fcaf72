"""
Quotation store — append-only JSON array on disk.

    [{...request fields..., "id": 1718000000000, "createdAt": "2024-06-10T06:13:20.000Z"}, ...]

The store is built from an explicit StorageConfig at startup. When the
configured directory is not writable (read-only deploys) save() becomes a
no-op that still hands back a record with id/createdAt, so callers see the
same contract either way. Reads never fail: a missing or corrupt file is an
empty list.

Appends are serialized with a lock and written via temp file + rename, so
two concurrent saves can't lose each other's records.
"""

import os
import json
import time
import logging
import tempfile
import threading
from copy import deepcopy
from datetime import datetime, timezone
from typing import List, Optional

from quotegen.core.config import StorageConfig

log = logging.getLogger("quotegen.store")


def _iso_utc(ms: int) -> str:
    """Millisecond ISO-8601 in UTC with a Z suffix: 2024-06-10T06:13:20.000Z"""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


class QuotationStore:

    def __init__(self, config: StorageConfig, clock=time.time):
        self.config = config
        self._clock = clock
        self._lock = threading.Lock()
        self._last_id = 0

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def durable(self) -> bool:
        return self.config.writable

    def ensure_storage(self) -> bool:
        """Create the data dir and an empty [] file if missing. False when read-only."""
        if not self.config.writable:
            return False
        try:
            os.makedirs(self.config.data_dir, exist_ok=True)
            if not os.path.exists(self.path):
                self._write_all([])
            return True
        except OSError as e:
            log.warning("Quotation storage unavailable at %s: %s", self.path, e)
            return False

    def load(self) -> List[dict]:
        """All records in insertion order; [] if storage is missing or unreadable."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Could not read %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            log.warning("Ignoring %s: expected a JSON array, got %s",
                        self.path, type(data).__name__)
            return []
        return data

    def count(self) -> int:
        return len(self.load())

    def get(self, quote_id) -> Optional[dict]:
        try:
            wanted = int(quote_id)
        except (TypeError, ValueError):
            return None
        for rec in self.load():
            if rec.get("id") == wanted:
                return rec
        return None

    def _next_id(self) -> int:
        # millisecond epoch, bumped so two saves in the same ms never collide
        now_ms = int(self._clock() * 1000)
        self._last_id = max(now_ms, self._last_id + 1)
        return self._last_id

    def save(self, payload: dict) -> dict:
        """Append payload as a new record and return it with id/createdAt."""
        with self._lock:
            record = deepcopy(payload) if isinstance(payload, dict) else {}
            quote_id = self._next_id()
            record["id"] = quote_id
            record["createdAt"] = _iso_utc(quote_id)

            if not self.ensure_storage():
                log.info("Quotation %d not persisted (storage read-only)", quote_id)
                return record

            quotations = self.load()
            quotations.append(record)
            try:
                self._write_all(quotations)
            except OSError as e:
                log.error("Failed to persist quotation %d: %s", quote_id, e)
                raise
            log.info("Quotation %d saved (%d on file)", quote_id, len(quotations))
            return record

    def _write_all(self, quotations: list):
        fd, tmp = tempfile.mkstemp(dir=self.config.data_dir, prefix=".quotations-",
                                   suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(quotations, f, indent=2, default=str)
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise
