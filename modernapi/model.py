"""Book records as stored in the database and as exchanged with clients."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar


def _lookup(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        value = next((v for k, v in data.items() if isinstance(k, str) and k.lower() == key), None)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"cannot use {value!r} as {key}: not {kind.__name__}")
    return value


@dataclass
class DBBook:
    """A book row of the "books" table."""

    TABLE_NAME: ClassVar[str] = "books"

    isbn: int = 0
    name: str = ""
    publisher: str = ""

    def to_json(self) -> dict[str, Any]:
        """Return the JSON object for this row; the publisher key is "publiser"."""
        return {"isbn": self.isbn, "name": self.name, "publiser": self.publisher}


@dataclass
class Book:
    """A book as exchanged with clients."""

    isbn: int = 0
    name: str = ""
    publisher: str = ""

    @staticmethod
    def from_json(data: str | bytes | Mapping[str, Any]) -> Book:
        """Build a book from a JSON object; unknown keys are ignored."""
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, Mapping):
            raise ValueError("book JSON must be an object")
        return Book(
            isbn=_lookup(data, "isbn", int, 0),
            name=_lookup(data, "name", str, ""),
            publisher=_lookup(data, "publisher", str, ""),
        )