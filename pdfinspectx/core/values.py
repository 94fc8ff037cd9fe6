"""Python representation of PDF values.

Booleans, numbers, arrays and dictionaries map onto the built-in ``bool``,
``int``/``float``, ``list`` and ``dict`` types.  Names and strings are
``str`` subclasses so they compare equal to plain text while keeping their
lexical kind, and indirect references are a dedicated value type rather
than formatted text.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Union

__all__ = [
    "Name",
    "PDFString",
    "HexString",
    "Reference",
    "UnknownValue",
    "PDFValue",
    "value_kind",
    "to_jsonable",
]

_REFERENCE_TEXT = re.compile(r"^\s*(\d+)\s+(\d+)\s+R\s*$")


class Name(str):
    """Decoded PDF name without its leading slash."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Name({str.__repr__(self)})"

    def pdf(self) -> str:
        return "/" + self


class PDFString(str):
    """Literal string with escape sequences already resolved."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"PDFString({str.__repr__(self)})"


class HexString(str):
    """Hexadecimal string kept in its ``<...>`` form."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"HexString({str.__repr__(self)})"

    @property
    def digits(self) -> str:
        return self[1:-1] if self.startswith("<") and self.endswith(">") else str(self)


@dataclass(slots=True, frozen=True, order=True)
class Reference:
    """Indirect reference ``N G R``."""

    object_number: int
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.object_number} {self.generation} R"

    @property
    def identity(self) -> tuple[int, int]:
        return (self.object_number, self.generation)

    @classmethod
    def from_text(cls, text: str) -> "Reference | None":
        match = _REFERENCE_TEXT.match(text)
        if match is None:
            return None
        return cls(int(match.group(1)), int(match.group(2)))


@dataclass(slots=True, frozen=True)
class UnknownValue:
    """Fragment the value grammar could not classify."""

    raw: str

    def __str__(self) -> str:
        return self.raw


PDFValue = Union[
    bool, int, float, Name, PDFString, HexString, Reference, UnknownValue, list, dict, None
]


def value_kind(value: Any) -> str:
    """Return the grammar variant name of ``value``."""

    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, Name):
        return "name"
    if isinstance(value, PDFString):
        return "string"
    if isinstance(value, HexString):
        return "hex"
    if isinstance(value, Reference):
        return "reference"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "dictionary"
    if value is None:
        return "null"
    return "unknown"


def to_jsonable(value: Any) -> Any:
    """Convert a parsed value tree into JSON-compatible data."""

    if isinstance(value, Reference):
        return {"$ref": str(value)}
    if isinstance(value, UnknownValue):
        return {"$unknown": value.raw}
    if isinstance(value, Name):
        return "/" + str(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value
