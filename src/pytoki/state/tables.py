"""In-memory entity tables.

A table is an insertion-ordered mapping from entity id to a frozen
model. Tables do no locking and no persistence of their own; the store
owns both and is the only caller of the mutating methods.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, Protocol, TypeVar

from pydantic import ValidationError

from pytoki._redact import redact_for_log


class _Entity(Protocol):
    @property
    def id(self) -> str: ...

    def to_record(self) -> dict[str, Any]: ...


T = TypeVar("T", bound=_Entity)

_logger = logging.getLogger(__name__)


class EntityTable(Generic[T]):
    """Ordered collection of one entity type keyed by ``id``."""

    def __init__(self, name: str, model: Any) -> None:
        self.name = name
        self._model = model
        self._rows: dict[str, T] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._rows

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._rows.values()))

    def get(self, entity_id: str | None) -> T | None:
        if entity_id is None:
            return None
        return self._rows.get(entity_id)

    def insert(self, row: T) -> None:
        """Append a new row. Raises :class:`KeyError` on a duplicate id."""
        if row.id in self._rows:
            raise KeyError(f"duplicate {self.name} id {row.id!r}")
        self._rows[row.id] = row

    def replace(self, row: T) -> bool:
        """Replace an existing row in place (order is kept). Returns ``False`` if unknown."""
        if row.id not in self._rows:
            return False
        self._rows[row.id] = row
        return True

    def remove(self, entity_id: str) -> T | None:
        return self._rows.pop(entity_id, None)

    def remove_many(self, entity_ids: Iterable[str]) -> list[T]:
        removed: list[T] = []
        for entity_id in entity_ids:
            row = self._rows.pop(entity_id, None)
            if row is not None:
                removed.append(row)
        return removed

    def where(self, predicate: Callable[[T], bool]) -> list[T]:
        return [row for row in self._rows.values() if predicate(row)]

    def snapshot(self) -> tuple[T, ...]:
        return tuple(self._rows.values())

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_records(self) -> list[dict[str, Any]]:
        return [row.to_record() for row in self._rows.values()]

    def load_records(self, records: Iterable[Any]) -> int:
        """Replace the contents with validated *records*.

        Invalid records and duplicate ids are skipped with a warning so
        one corrupt row cannot make the whole table unreadable.
        Returns the number of rows loaded.
        """
        self._rows.clear()
        for index, record in enumerate(records):
            try:
                row: T = self._model.model_validate(record)
            except ValidationError as exc:
                _logger.warning(
                    "Skipping invalid %s record #%d: %s (%s)",
                    self.name,
                    index,
                    exc.error_count(),
                    redact_for_log(record),
                )
                continue
            if row.id in self._rows:
                _logger.warning("Skipping duplicate %s id %s", self.name, row.id)
                continue
            self._rows[row.id] = row
        return len(self._rows)
