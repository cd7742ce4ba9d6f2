"""JSON-array backed record stores for clients and issuer profiles."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from invoicedesk.slug import derive_identifier

LOGGER = logging.getLogger("invoicedesk.data.json_store")

Record = Dict[str, Any]
KeyFunc = Callable[[Mapping[str, Any]], Any]

SEARCH_FIELDS = ("name", "email", "phone", "address")


def record_id(record: Mapping[str, Any]) -> Any:
    return record.get("id")


class JsonArrayStore:
    """Keeps a list of keyed records in a single JSON array file.

    The file (and its parent folder) is created with ``[]`` on first access.
    Reads fail soft and return an empty list; writes raise.
    """

    def __init__(self, path: Path | str, defaults: Optional[List[Record]] = None) -> None:
        self.path: Path = Path(path)
        self.defaults: List[Record] = list(defaults or [])

    def _ensure_file(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._dump(self.defaults)

    def _dump(self, records: List[Record]) -> None:
        self.path.write_text(
            json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def read_all(self) -> List[Record]:
        """Return records in on-disk order, or ``[]`` if the file is unusable."""
        try:
            self._ensure_file()
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            LOGGER.exception("Failed to read store %s", self.path)
            return []
        if not isinstance(data, list):
            LOGGER.warning("Store %s does not hold a JSON array; treating as empty", self.path)
            return []
        return [item for item in data if isinstance(item, dict)]

    def write_all(self, records: List[Record]) -> None:
        self._ensure_file()
        self._dump(list(records))
        LOGGER.debug("Wrote %d records to %s", len(records), self.path)

    def upsert(self, record: Mapping[str, Any], key_of: KeyFunc = record_id) -> Record:
        """Merge ``record`` into the matching entry, or append it.

        The merge is shallow: top-level fields of ``record`` replace the
        stored ones, everything else is kept.
        """
        records = self.read_all()
        key = key_of(record)
        for index, existing in enumerate(records):
            if key_of(existing) == key:
                merged = {**existing, **record}
                records[index] = merged
                break
        else:
            merged = dict(record)
            records.append(merged)
        self.write_all(records)
        return merged

    def delete_by_id(self, record_key: Any, key_of: KeyFunc = record_id) -> None:
        records = self.read_all()
        remaining = [item for item in records if key_of(item) != record_key]
        if len(remaining) == len(records):
            return
        self.write_all(remaining)


class EntityStore(JsonArrayStore):
    """Client or profile address book persisted as a JSON array."""

    def __init__(self, path: Path | str, prefix: str) -> None:
        super().__init__(path, defaults=[])
        self.prefix = prefix

    def list(self, query: str = "") -> List[Record]:
        records = self.read_all()
        if not query:
            return records
        needle = query.lower()
        return [
            record
            for record in records
            if any(
                needle in str(record[name]).lower()
                for name in SEARCH_FIELDS
                if record.get(name)
            )
        ]

    def save(self, record: Mapping[str, Any]) -> Record:
        entity_id = derive_identifier(record.get("id"), record.get("name"), prefix=self.prefix)
        return self.upsert({**record, "id": entity_id})

    def delete(self, entity_id: str) -> None:
        self.delete_by_id(entity_id)
