from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_RECORD_ID = re.compile(r"^\s*[+-]?[0-9]+\s*$")


def _timestamp() -> str:
    # e.g. 2024-05-01T12:30:00.123Z
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ResourceStore:
    """Append-only, process-local list of records for one resource type.

    Ids are assigned as ``len(records) + 1``; since nothing is ever removed
    they are unique and strictly increasing.
    """

    def __init__(self, resource: str) -> None:
        self.resource = resource
        self._lock = Lock()
        self._records: list[Record] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def create(self, fields: Mapping[str, Any]) -> Record:
        """Store client fields verbatim; ``id`` and ``createdAt`` are server-assigned."""

        with self._lock:
            record: Record = {"id": len(self._records) + 1}
            record.update((key, value) for key, value in fields.items() if key not in ("id", "createdAt"))
            record["createdAt"] = _timestamp()
            self._records.append(record)

        logger.info("record.created", extra={"resource": self.resource, "record_id": record["id"]})
        return dict(record)

    def list_records(self) -> list[Record]:
        with self._lock:
            return [dict(record) for record in self._records]

    def get(self, record_id: int) -> Record | None:
        with self._lock:
            for record in self._records:
                if record["id"] == record_id:
                    return dict(record)
        return None


def parse_record_id(raw: str | None) -> int | None:
    """Parse a path id; anything that is not a base-10 integer yields ``None``."""

    if raw is None:
        return None
    if not _RECORD_ID.match(raw):
        return None
    try:
        return int(raw)
    except ValueError:
        # Longer than the interpreter's int conversion limit; no such id exists.
        return None
