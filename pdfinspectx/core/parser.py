"""Sequential PDF scanner.

The scanner recovers indirect objects, the classic cross-reference table and
the trailer straight from the byte stream.  Object discovery uses a growing
search window so the remaining file is never decoded wholesale; only the
span of each object is decoded (latin-1) and handed to the value lexer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
from typing import Any, Iterator

from ..config import DEFAULT_CONFIG, InspectorConfig
from ..exceptions import EmptyInputError, ResourceExceeded
from .enrichment import enrich_properties
from .lexer import extract_outer_dictionary, parse_dictionary, parse_value, search_outside_strings
from .model import Document, Header, PDFObject, StreamPayload, Trailer, XRefEntry, XRefState, XRefTable
from .schema import type_spec
from .utils import get_logger, resolve_path
from .values import UnknownValue

__all__ = [
    "ScanCursor",
    "parse_header",
    "parse_next_object",
    "determine_object_type",
    "parse_object_by_type",
    "parse_xref_table",
    "parse_trailer",
    "apply_trailer_type_corrections",
    "iter_objects",
    "PDFParser",
    "read_source",
]

LOGGER = get_logger("pdfinspectx.parser")


# -- Patterns ----------------------------------------------------------------


_OBJ_MARKER = re.compile(rb"(?<![0-9])(\d+)\s+(\d+)\s+obj\b")
_OBJ_MARKER_TEXT = re.compile(r"(?<![0-9])(\d+)\s+(\d+)\s+obj\b")
_ENDOBJ = re.compile(rb"endobj")
_KEYWORD = re.compile(rb"(?<![A-Za-z])(xref|trailer|startxref)(?=\s)|%%EOF")
_STREAM = re.compile(rb"(?<![A-Za-z])stream[ \t]*\r?\n(.*?)(?:\r?\n)?endstream", re.S)
_STREAM_KEYWORD = re.compile(rb"(?<![A-Za-z])stream[ \t]*\r?\n")
_HEADER = re.compile(r"%PDF-(\d+\.\d+)")
_XREF_SECTION = re.compile(rb"(?<![A-Za-z])xref[ \t]*\r?\n(.*?)(?=trailer|startxref|\Z)", re.S)
_TRAILER_SECTION = re.compile(rb"(?<![A-Za-z])trailer\s*(.*?)(?=startxref|%%EOF|\Z)", re.S)
_STARTXREF = re.compile(rb"(?<![A-Za-z])startxref\s*(\S+)")
_EOF = re.compile(rb"%%EOF")
_SUBSECTION = re.compile(r"^(\d+)\s+(\d+)$")
_XREF_ENTRY = re.compile(r"^(\d{10})\s+(\d{5})\s+([nf])$")

# Bytes re-examined after a window grows so markers split by the old edge match.
_OVERLAP = 64

# Objects named by the trailer that may lack a usable /Type.
_TRAILER_TYPES = (("Root", "Catalog"), ("Info", "Info"), ("Encrypt", "Encrypt"))


# -- Cursor ------------------------------------------------------------------


@dataclass(slots=True)
class ScanCursor:
    """Mutable scan position owned by a single parse."""

    position: int = 0
    objects_seen: int = 0
    windows_grown: int = 0


def read_source(source: bytes | bytearray | memoryview | str | Path) -> bytes:
    """Return the raw bytes for ``source`` (bytes-like or a filesystem path)."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    path = resolve_path(source)
    return path.read_bytes()


# -- Header ------------------------------------------------------------------


def parse_header(data: bytes, probe: int = DEFAULT_CONFIG.header_probe) -> Header:
    """Parse the ``%PDF-x.y`` line from the first ``probe`` bytes."""

    text = data[:probe].decode("latin-1")
    first_line = re.split(r"[\r\n]", text, maxsplit=1)[0]
    match = _HEADER.search(text)
    if match is None:
        LOGGER.debug("No PDF header found in the first %d bytes", probe)
        return Header(version=None, raw_content=first_line, is_valid=False)
    line_start = max(text.rfind("\n", 0, match.start()), text.rfind("\r", 0, match.start())) + 1
    line = re.split(r"[\r\n]", text[line_start:], maxsplit=1)[0]
    return Header(version=match.group(1), raw_content=line, is_valid=True)


# -- Objects -----------------------------------------------------------------


def determine_object_type(properties: dict[str, Any], raw_content: str) -> str:
    """Resolve the type tag from ``/Type``, falling back to stream detection."""

    declared = properties.get("Type")
    if isinstance(declared, str):
        spec = type_spec(declared)
        if spec is not None:
            return spec.name
    if "stream" in raw_content and "endstream" in raw_content:
        return "Stream"
    return "Unknown"


def parse_object_by_type(properties: dict[str, Any], type_tag: str) -> dict[str, Any]:
    """Return the enrichment fields registered for ``type_tag``."""

    return enrich_properties(type_tag, properties)


def _parse_body(span: bytes, body_start: int) -> tuple[dict[str, Any], Any, StreamPayload | None]:
    """Parse the bytes between ``obj`` and ``endobj`` of one object."""

    head = span[body_start:]
    stream: StreamPayload | None = None
    match = _STREAM.search(span, body_start)
    if match is not None:
        payload = match.group(1)
        stream = StreamPayload(data=payload, length=len(payload))
        head = span[body_start : match.start()]
    else:
        keyword = _STREAM_KEYWORD.search(span, body_start)
        if keyword is not None:
            head = span[body_start : keyword.start()]
    text = head.decode("latin-1")
    dictionary = extract_outer_dictionary(text)
    if dictionary is not None:
        return parse_dictionary(dictionary), None, stream
    stripped = text.strip()
    if not stripped:
        return {}, None, stream
    value, _ = parse_value(stripped)
    if isinstance(value, UnknownValue) and not value.raw:
        value = None
    return {}, value, stream


def _later_marker(data: bytes, start: int, end: int) -> int | None:
    """Offset of the first object marker in ``data[start:end]`` outside strings and comments."""

    text = data[start:end].decode("latin-1")
    match = search_outside_strings(_OBJ_MARKER_TEXT, text)
    return None if match is None else start + match.start()


def _grow(window_end: int, step: int, size: int, cursor: ScanCursor) -> int:
    cursor.windows_grown += 1
    return min(window_end + step, size)


def parse_next_object(
    data: bytes,
    cursor: ScanCursor,
    config: InspectorConfig = DEFAULT_CONFIG,
) -> PDFObject | None:
    """Scan forward from ``cursor`` for the next indirect object.

    Returns ``None`` when a structural keyword (``xref``, ``trailer``,
    ``startxref``, ``%%EOF``) comes first or nothing further can be found;
    the cursor is always moved forward so callers can simply loop until the
    end of ``data``.
    """

    size = len(data)
    start = cursor.position
    if start >= size:
        return None
    step = config.window_step
    window_end = min(start + step, size)
    search_from = start

    # Locate the next object marker or structural keyword.
    while True:
        marker = _OBJ_MARKER.search(data, search_from, window_end)
        keyword = _KEYWORD.search(data, search_from, window_end)
        if keyword is not None and (marker is None or keyword.start() < marker.start()):
            if keyword.group(0) == b"%%EOF":
                # Incremental updates keep objects after an %%EOF.
                later = _OBJ_MARKER.search(data, keyword.end())
                cursor.position = keyword.end() if later is not None else size
            else:
                cursor.position = keyword.end()
            LOGGER.debug("Structural keyword %r at offset %d", keyword.group(0), keyword.start())
            return None
        if marker is not None:
            break
        if window_end >= size:
            # The remaining bytes hold no marker at all.
            cursor.position = size
            return None
        search_from = max(start, window_end - _OVERLAP)
        window_end = _grow(window_end, step, size, cursor)

    object_number = int(marker.group(1))
    generation = int(marker.group(2))
    obj_start = marker.start()
    body_start = marker.end()

    # Locate the matching endobj, growing the window while it is missing.
    search_from = body_start
    while True:
        end_match = _ENDOBJ.search(data, search_from, window_end)
        if end_match is not None:
            later = _later_marker(data, body_start, end_match.start())
            if later is None or _STREAM_KEYWORD.search(data, body_start, later) is not None:
                span_end = end_match.end()
                has_endobj = True
                break
            # The endobj belongs to the next object.
            span_end = later
            has_endobj = False
            break
        if window_end >= size:
            later = _OBJ_MARKER.search(data, body_start)
            tail = _KEYWORD.search(data, body_start)
            candidates = [m.start() for m in (later, tail) if m is not None]
            span_end = min(candidates) if candidates else size
            has_endobj = False
            break
        search_from = max(body_start, window_end - _OVERLAP)
        window_end = _grow(window_end, step, size, cursor)

    if not has_endobj:
        LOGGER.warning(
            "Object %d %d at offset %d has no endobj; span closed at %d",
            object_number,
            generation,
            obj_start,
            span_end,
        )

    cursor.position = max(span_end, body_start)
    cursor.objects_seen += 1

    span = data[obj_start:span_end]
    relative_body = body_start - obj_start
    body_span = span[: -len(b"endobj")] if has_endobj else span
    properties, value, stream = _parse_body(body_span, relative_body)
    raw_content = span.decode("latin-1").strip()
    type_tag = determine_object_type(properties, raw_content)
    obj = PDFObject(
        object_number=object_number,
        generation=generation,
        offset=obj_start,
        raw_content=raw_content,
        type_tag=type_tag,
        properties=properties,
        value=value,
        stream=stream,
        has_endobj=has_endobj,
    )
    obj.enrichment = parse_object_by_type(properties, type_tag)
    return obj


def iter_objects(data: bytes, config: InspectorConfig = DEFAULT_CONFIG) -> Iterator[PDFObject]:
    """Yield every indirect object in ``data`` in file order."""

    cursor = ScanCursor()
    size = len(data)
    while cursor.position < size:
        before = cursor.position
        obj = parse_next_object(data, cursor, config)
        if cursor.position <= before:
            cursor.position = before + 1
        if obj is None:
            continue
        if config.max_objects and cursor.objects_seen > config.max_objects:
            raise ResourceExceeded(
                f"More than {config.max_objects} objects in input",
                limit="max_objects",
                value=cursor.objects_seen,
            )
        yield obj


# -- Cross-reference table and trailer ---------------------------------------


def _select_section(matches: list[re.Match[bytes]], prefer_offset: int | None) -> re.Match[bytes] | None:
    if not matches:
        return None
    if prefer_offset is not None:
        for match in matches:
            if match.start() == prefer_offset:
                return match
    return matches[-1]


def parse_xref_table(data: bytes, prefer_offset: int | None = None) -> XRefTable | None:
    """Parse the classic ``xref`` section.

    When several sections exist (incremental updates) the one starting at
    ``prefer_offset`` is used, otherwise the last one in the file.
    """

    section = _select_section(list(_XREF_SECTION.finditer(data)), prefer_offset)
    if section is None:
        return None
    raw = section.group(1).decode("latin-1")
    table = XRefTable(start_position=section.start(), raw_content=raw)

    first_object = 0
    running_index = 0
    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        header = _SUBSECTION.match(stripped)
        if header is not None:
            first_object = int(header.group(1))
            running_index = 0
            table.subsections.append((first_object, int(header.group(2))))
            continue
        entry = _XREF_ENTRY.match(stripped)
        if entry is None:
            table.malformed_lines.append(stripped)
            continue
        field_one = int(entry.group(1))
        generation = int(entry.group(2))
        object_number = first_object + running_index
        running_index += 1
        if entry.group(3) == "n":
            table.entries.append(XRefEntry(object_number, generation, XRefState.IN_USE, offset=field_one))
        else:
            table.entries.append(
                XRefEntry(object_number, generation, XRefState.FREE, next_free_object=field_one)
            )

    table.is_valid = bool(table.subsections) and not table.malformed_lines
    LOGGER.debug(
        "xref at %d: %d entries in %d subsections", table.start_position, len(table.entries), len(table.subsections)
    )
    return table


def parse_trailer(data: bytes) -> Trailer | None:
    """Parse the last ``trailer`` dictionary plus ``startxref`` and ``%%EOF``."""

    startxref_matches = list(_STARTXREF.finditer(data))
    trailer_matches = list(_TRAILER_SECTION.finditer(data))
    if not trailer_matches and not startxref_matches:
        return None

    trailer = Trailer(has_eof=_EOF.search(data) is not None)
    if startxref_matches:
        raw_value = startxref_matches[-1].group(1).decode("latin-1")
        trailer.startxref_raw = raw_value
        if raw_value.isdigit():
            trailer.startxref = int(raw_value)
    if trailer_matches:
        section = trailer_matches[-1]
        text = section.group(1).decode("latin-1")
        trailer.start_position = section.start()
        trailer.raw_content = text.strip()
        dictionary = extract_outer_dictionary(text)
        if dictionary is not None:
            trailer.properties = parse_dictionary(dictionary)
            trailer.is_valid = True
    return trailer


def apply_trailer_type_corrections(document: Document) -> list[PDFObject]:
    """Assign the expected type to trailer-referenced objects of unknown type."""

    corrected: list[PDFObject] = []
    trailer = document.trailer
    if trailer is None:
        return corrected
    for key, type_tag in _TRAILER_TYPES:
        obj = document.resolve(trailer.properties.get(key))
        if obj is None or obj.type_tag != "Unknown":
            continue
        obj.type_tag = type_tag
        obj.enrichment = parse_object_by_type(obj.properties, type_tag)
        corrected.append(obj)
        LOGGER.debug("Object %s typed as %s from trailer /%s", obj.reference, type_tag, key)
    return corrected


# -- Parser facade -----------------------------------------------------------


class PDFParser:
    """Parse a PDF byte stream into a :class:`Document`.

    Each instance holds its own cursor; a parser may be reused, every call to
    :meth:`parse` starts from a fresh document.
    """

    def __init__(
        self,
        source: bytes | bytearray | memoryview | str | Path,
        config: InspectorConfig | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.source_path: Path | None = None
        if not isinstance(source, (bytes, bytearray, memoryview)):
            self.source_path = resolve_path(source)
        self._data = read_source(source)

    @property
    def data(self) -> bytes:
        return self._data

    def parse(self) -> Document:
        data = self._data
        if not data:
            raise EmptyInputError()
        if self.config.max_bytes and len(data) > self.config.max_bytes:
            raise ResourceExceeded(
                f"Input of {len(data)} bytes exceeds the {self.config.max_bytes} byte budget",
                limit="max_bytes",
                value=len(data),
            )

        document = Document()
        physical = document.physical
        physical.file_size = len(data)
        physical.header = parse_header(data, self.config.header_probe)

        duplicates = 0
        for obj in iter_objects(data, self.config):
            if not document.add_object(obj):
                duplicates += 1

        physical.trailer = parse_trailer(data)
        prefer = physical.trailer.startxref if physical.trailer else None
        physical.xref = parse_xref_table(data, prefer)
        apply_trailer_type_corrections(document)

        LOGGER.debug(
            "Parsed %d objects (%d redefinitions), version %s, %d bytes",
            len(physical.objects),
            duplicates,
            physical.version,
            physical.file_size,
        )
        return document

