"""In-memory heat record store — owned by one engine, no persistence logic."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from hearth.models import HeatMetrics, HeatRecord


class HeatStore:
    """Mapping of identifier → HeatRecord.

    Records are created lazily by getOrCreate. Nothing here deletes or re-keys
    a record unless asked to through remove/rename.
    """

    def __init__(self, records: Iterable[HeatRecord] = ()):
        self._records: dict[str, HeatRecord] = {r.identifier: r for r in records}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __iter__(self) -> Iterator[HeatRecord]:
        return iter(list(self._records.values()))

    def get(self, identifier: str) -> HeatRecord | None:
        return self._records.get(identifier)

    def getOrCreate(self, identifier: str, now: int) -> HeatRecord:
        record = self._records.get(identifier)
        if record is None:
            record = HeatRecord(
                identifier=identifier,
                metrics=HeatMetrics(last_accessed=now),
                first_tracked=now,
                last_updated=now,
            )
            self._records[identifier] = record
        return record

    def all(self) -> list[HeatRecord]:
        return list(self._records.values())

    def remove(self, identifier: str) -> bool:
        return self._records.pop(identifier, None) is not None

    def rename(self, old: str, new: str) -> bool:
        """Re-key a record. An existing record under `new` is replaced."""
        record = self._records.pop(old, None)
        if record is None:
            return False
        record.identifier = new
        self._records[new] = record
        return True

    def replaceAll(self, records: Iterable[HeatRecord]) -> None:
        """Swap the whole contents in one assignment."""
        self._records = {r.identifier: r for r in records}

    def snapshot(self) -> list[HeatRecord]:
        return [r.model_copy(deep=True) for r in self._records.values()]

    def clear(self) -> None:
        self._records = {}
