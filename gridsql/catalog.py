from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional

from .errors import ConfigurationMissing


@dataclass(frozen=True)
class ColumnDefinition:
    """
    Where a client-visible grid field lives in the database.
    `type` is the optional category from the grid config (TEXT, NUMBER, ...).
    """
    db_name: str
    type: Optional[str] = None

    # camelCase JSON helpers
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"dbName": self.db_name}
        if self.type:
            out["type"] = self.type
        return out

    @classmethod
    def from_dict(cls, field_name: str, data: Dict[str, Any]) -> "ColumnDefinition":
        if not isinstance(data, dict):
            raise ConfigurationMissing(f"Bad column definition for {field_name}: {data!r}")
        db_name = data.get("dbName") or data.get("dbname")
        if not db_name:
            raise ConfigurationMissing(f"Column {field_name} has no dbName")
        typ = data.get("type")
        return cls(db_name=str(db_name), type=str(typ).upper() if typ else None)


class ColumnCatalog(Mapping):
    """
    Whitelist of the fields a grid may filter or sort on.

    Read-only once built, so a single instance can be shared by every
    request against the grid.
    """

    def __init__(self, columns: Optional[Mapping[str, ColumnDefinition]] = None):
        self._columns = MappingProxyType(dict(columns or {}))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnCatalog":
        return cls({name: ColumnDefinition.from_dict(name, d) for name, d in (data or {}).items()})

    def to_dict(self) -> Dict[str, Any]:
        return {name: col.to_dict() for name, col in self._columns.items()}

    def resolve(self, field_name: Any) -> Optional[str]:
        """Return the db column for `field_name`, or None if it is not allowed."""
        if not isinstance(field_name, str):
            return None
        col = self._columns.get(field_name)
        return col.db_name if col else None

    def __getitem__(self, key: str) -> ColumnDefinition:
        return self._columns[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"ColumnCatalog({dict(self._columns)!r})"


__all__ = ["ColumnCatalog", "ColumnDefinition"]
