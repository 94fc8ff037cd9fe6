"""Recursive-descent lexer for the PDF value grammar.

The lexer works on decoded text (latin-1, so every byte maps to exactly one
character) and walks it with explicit indices.  Malformed fragments never
raise: they surface as :class:`~pdfinspectx.core.values.UnknownValue` so a
damaged file still produces a partial object graph.
"""

from __future__ import annotations

import re
from typing import Any

from .values import HexString, Name, PDFString, Reference, UnknownValue

__all__ = [
    "ValueLexer",
    "parse_value",
    "parse_dictionary",
    "parse_array",
    "guess_type",
    "convert_scalar",
    "coerce_unknown",
    "decode_name",
    "decode_literal",
    "normalize_hex",
    "extract_outer_dictionary",
    "find_matching",
    "search_outside_strings",
    "MAX_NESTING",
]


# -- Character classes and patterns ------------------------------------------


_WHITESPACE = "\x00\t\n\r\f "
_DELIMITERS = "()<>[]{}/%"
MAX_NESTING = 256

_NUMBER = re.compile(r"^-?\d+\.?\d*(?:[eE][+-]?\d+)?$")
_REFERENCE = re.compile(r"^(\d+)\s+(\d+)\s+R$")
_REFERENCE_AHEAD = re.compile(r"(\d+)\s+(\d+)\s+R(?![A-Za-z0-9_])")
_LOOSE_INT = re.compile(r"^[+-]?\d+$")
_LOOSE_FLOAT = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+)$")
_NAME_ESCAPE = re.compile(r"#([0-9A-Fa-f]{2})")
_STRING_OR_COMMENT = re.compile(r"[(%]")

_LITERAL_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "(": "(",
    ")": ")",
    "\\": "\\",
}


# -- Scalar helpers ----------------------------------------------------------


def guess_type(raw: str) -> str:
    """Classify a raw fragment; the first matching rule wins."""

    text = raw.strip()
    if text.startswith("/"):
        return "name"
    if text.startswith("("):
        return "string"
    if text.startswith("<<"):
        return "dictionary"
    if text.startswith("<"):
        return "hex"
    if text.startswith("["):
        return "array"
    if text in ("true", "false"):
        return "boolean"
    if _NUMBER.match(text):
        return "number"
    if _REFERENCE.match(text):
        return "reference"
    if text == "null":
        return "null"
    return "unknown"


def decode_name(raw: str) -> Name:
    """Decode ``#xx`` escapes; a leading slash is dropped if present."""

    body = raw[1:] if raw.startswith("/") else raw
    return Name(_NAME_ESCAPE.sub(lambda match: chr(int(match.group(1), 16)), body))


def decode_literal(body: str) -> PDFString:
    """Resolve backslash escapes inside a literal string body."""

    out: list[str] = []
    index = 0
    length = len(body)
    while index < length:
        char = body[index]
        if char != "\\" or index + 1 >= length:
            out.append(char)
            index += 1
            continue
        nxt = body[index + 1]
        if nxt in _LITERAL_ESCAPES:
            out.append(_LITERAL_ESCAPES[nxt])
            index += 2
        elif nxt in "01234567":
            digits = nxt
            scan = index + 2
            while scan < length and len(digits) < 3 and body[scan] in "01234567":
                digits += body[scan]
                scan += 1
            out.append(chr(int(digits, 8) & 0xFF))
            index = scan
        elif nxt == "\r":
            # line continuation, CRLF counts as one end-of-line
            index += 3 if body[index + 2 : index + 3] == "\n" else 2
        elif nxt == "\n":
            index += 2
        else:
            out.append(nxt)
            index += 2
    return PDFString("".join(out))


def normalize_hex(raw: str) -> HexString:
    """Strip whitespace inside a hex string, keeping the angle brackets."""

    inner = raw.strip()
    if inner.startswith("<"):
        inner = inner[1:]
    if inner.endswith(">"):
        inner = inner[:-1]
    digits = "".join(ch for ch in inner if ch not in _WHITESPACE)
    return HexString(f"<{digits}>")


def coerce_unknown(raw: str) -> Any:
    """Best-effort reclassification of an unrecognised scalar."""

    text = raw.strip()
    reference = Reference.from_text(text)
    if reference is not None:
        return reference
    if _LOOSE_INT.match(text):
        return int(text)
    if _LOOSE_FLOAT.match(text):
        return float(text)
    return UnknownValue(text)


def convert_scalar(raw: str) -> Any:
    """Convert a bare token into its Python value."""

    text = raw.strip()
    kind = guess_type(text)
    if kind == "boolean":
        return text == "true"
    if kind == "number":
        if "." in text or "e" in text or "E" in text:
            return float(text)
        return int(text)
    if kind == "reference":
        match = _REFERENCE.match(text)
        return Reference(int(match.group(1)), int(match.group(2)))
    if kind == "null":
        return None
    if kind == "name":
        return decode_name(text)
    return coerce_unknown(text)


# -- Bracket matching --------------------------------------------------------


def _skip_literal(text: str, pos: int, end: int) -> int:
    """Return the index just past the literal string opened at ``pos``."""

    depth = 0
    index = pos
    while index < end:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return end


def _skip_comment(text: str, pos: int, end: int) -> int:
    index = pos
    while index < end and text[index] not in "\r\n":
        index += 1
    return index


def find_matching(text: str, pos: int, opener: str, closer: str, end: int | None = None) -> int:
    """Return the index just past the token closing the one at ``pos``.

    Literal strings are skipped so that brackets inside them do not count.
    ``-1`` is returned when the opener is never balanced before ``end``.
    """

    limit = len(text) if end is None else min(end, len(text))
    depth = 0
    index = pos
    width_open = len(opener)
    width_close = len(closer)
    while index < limit:
        char = text[index]
        if char == "(":
            index = _skip_literal(text, index, limit)
            continue
        if char == "%":
            index = _skip_comment(text, index, limit)
            continue
        if text.startswith(opener, index):
            depth += 1
            index += width_open
            continue
        if text.startswith(closer, index):
            depth -= 1
            index += width_close
            if depth == 0:
                return index
            continue
        if opener == "<<" and char == "<":
            # hex string inside a dictionary
            close = text.find(">", index + 1, limit)
            index = limit if close == -1 else close + 1
            continue
        index += 1
    return -1


def search_outside_strings(
    pattern: re.Pattern[str],
    text: str,
    start: int = 0,
    end: int | None = None,
) -> re.Match[str] | None:
    """Return the first ``pattern`` match not inside a literal string or comment."""

    limit = len(text) if end is None else min(end, len(text))
    index = start
    while index < limit:
        match = pattern.search(text, index, limit)
        if match is None:
            return None
        opener = _STRING_OR_COMMENT.search(text, index, match.start())
        if opener is None:
            return match
        if opener.group(0) == "(":
            index = _skip_literal(text, opener.start(), limit)
        else:
            index = _skip_comment(text, opener.start(), limit)
    return None


def extract_outer_dictionary(body: str) -> str | None:
    """Return the outermost ``<<...>>`` of ``body`` including delimiters."""

    start = body.find("<<")
    if start == -1:
        return None
    stop = find_matching(body, start, "<<", ">>")
    if stop == -1:
        last = body.rfind(">>")
        if last <= start:
            return body[start:]
        return body[start : last + 2]
    return body[start:stop]


# -- Lexer -------------------------------------------------------------------


class ValueLexer:
    """Index-based reader over ``text[start:end]``."""

    def __init__(self, text: str, start: int = 0, end: int | None = None, *, depth: int = 0) -> None:
        self.text = text
        self.pos = max(0, start)
        self.end = len(text) if end is None else min(end, len(text))
        self.depth = depth

    # Basic movement -----------------------------------------------------

    def at_end(self) -> bool:
        return self.pos >= self.end

    def peek(self, width: int = 1) -> str:
        return self.text[self.pos : min(self.pos + width, self.end)]

    def skip_whitespace(self) -> None:
        while self.pos < self.end:
            char = self.text[self.pos]
            if char in _WHITESPACE:
                self.pos += 1
            elif char == "%":
                self.pos = _skip_comment(self.text, self.pos, self.end)
            else:
                break

    def _regular_run(self) -> str:
        start = self.pos
        while self.pos < self.end:
            char = self.text[self.pos]
            if char in _WHITESPACE or char in _DELIMITERS:
                break
            self.pos += 1
        return self.text[start : self.pos]

    # Values -------------------------------------------------------------

    def read_value(self, *, in_array: bool = False) -> Any:
        self.skip_whitespace()
        if self.at_end():
            return UnknownValue("")
        head = self.peek(2)
        if head.startswith("/"):
            return self.read_name()
        if head.startswith("("):
            return self.read_literal()
        if head == "<<":
            return self.read_dictionary()
        if head.startswith("<"):
            return self.read_hex()
        if head.startswith("["):
            return self.read_array()
        reference = self._read_reference()
        if reference is not None:
            return reference
        if in_array:
            return self._read_array_scalar()
        return self._read_dictionary_scalar()

    def read_name(self) -> Name:
        self.pos += 1
        return decode_name(self._regular_run())

    def read_literal(self) -> PDFString:
        start = self.pos
        stop = _skip_literal(self.text, start, self.end)
        self.pos = stop
        body = self.text[start + 1 : stop - 1] if self.text[stop - 1 : stop] == ")" else self.text[start + 1 : stop]
        return decode_literal(body)

    def read_hex(self) -> HexString:
        start = self.pos
        close = self.text.find(">", start + 1, self.end)
        self.pos = self.end if close == -1 else close + 1
        return normalize_hex(self.text[start : self.pos])

    def read_dictionary(self) -> dict[str, Any] | UnknownValue:
        start = self.pos
        stop = find_matching(self.text, start, "<<", ">>", self.end)
        if stop == -1:
            stop = self.end
            inner_end = stop
        else:
            inner_end = stop - 2
        self.pos = stop
        if self.depth >= MAX_NESTING:
            return UnknownValue(self.text[start:stop])
        nested = ValueLexer(self.text, start + 2, inner_end, depth=self.depth + 1)
        return nested.read_dictionary_body()

    def read_array(self) -> list[Any] | UnknownValue:
        start = self.pos
        stop = find_matching(self.text, start, "[", "]", self.end)
        if stop == -1:
            stop = self.end
            inner_end = stop
        else:
            inner_end = stop - 1
        self.pos = stop
        if self.depth >= MAX_NESTING:
            return UnknownValue(self.text[start:stop])
        nested = ValueLexer(self.text, start + 1, inner_end, depth=self.depth + 1)
        return nested.read_array_body()

    def read_dictionary_body(self) -> dict[str, Any]:
        entries: dict[str, Any] = {}
        while True:
            self.skip_whitespace()
            if self.at_end():
                break
            if self.peek() != "/":
                # stray token where a key belongs
                skipped = self._regular_run()
                if not skipped:
                    self.pos += 1
                continue
            key = self.read_name()
            entries[str(key)] = self.read_value()
        return entries

    def read_array_body(self) -> list[Any]:
        items: list[Any] = []
        while True:
            self.skip_whitespace()
            if self.at_end():
                break
            before = self.pos
            items.append(self.read_value(in_array=True))
            if self.pos == before:
                self.pos += 1
        return items

    def _read_reference(self) -> Reference | None:
        match = _REFERENCE_AHEAD.match(self.text, self.pos, self.end)
        if match is None:
            return None
        self.pos = match.end()
        return Reference(int(match.group(1)), int(match.group(2)))

    def _read_array_scalar(self) -> Any:
        token = self._regular_run()
        if not token:
            # unbalanced closer such as ``)`` or ``>``
            token = self.text[self.pos]
            self.pos += 1
            return UnknownValue(token)
        return convert_scalar(token)

    def _read_dictionary_scalar(self) -> Any:
        start = self.pos
        while self.pos < self.end:
            char = self.text[self.pos]
            if char in "/<>[]()%":
                break
            if char in _WHITESPACE and _REFERENCE_AHEAD.match(self.text, self.pos + 1, self.end):
                break
            self.pos += 1
        raw = self.text[start : self.pos]
        if not raw.strip():
            self.pos = max(self.pos, start + 1)
            return UnknownValue(self.text[start : self.pos].strip())
        return convert_scalar(raw)


# -- Module level entry points -----------------------------------------------


def parse_value(text: str, pos: int = 0, end: int | None = None) -> tuple[Any, int]:
    """Parse one value starting at ``pos`` and return it with the end index."""

    lexer = ValueLexer(text, pos, end)
    value = lexer.read_value()
    return value, lexer.pos


def parse_dictionary(text: str) -> dict[str, Any]:
    """Parse a dictionary given with or without its ``<<``/``>>`` delimiters."""

    stripped = text.strip()
    if stripped.startswith("<<"):
        value, _ = parse_value(stripped)
        return value if isinstance(value, dict) else {}
    return ValueLexer(stripped).read_dictionary_body()


def parse_array(text: str) -> list[Any]:
    """Parse an array given with or without its brackets."""

    stripped = text.strip()
    if stripped.startswith("["):
        value, _ = parse_value(stripped)
        return value if isinstance(value, list) else []
    return ValueLexer(stripped).read_array_body()
