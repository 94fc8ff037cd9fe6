"""Structural validation of a parsed and analysed document.

The validator never raises for problems found in the file: every deviation
becomes a :class:`~pdfinspectx.core.model.Diagnostic` in either the error or
the warning list of the document's validation section.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any

from ..config import DEFAULT_CONFIG, InspectorConfig
from .lookups import check_required_objects, content_stats
from .model import Diagnostic, Document, Header, PDFObject, Trailer, XRefEntry, XRefTable
from .schema import SUBTYPE_MAP, subtype_spec, type_spec
from .utils import get_logger
from .values import HexString, PDFString

__all__ = [
    "SectionResult",
    "ObjectCheck",
    "XRefCheck",
    "validate_header",
    "validate_body",
    "validate_xref_structure",
    "validate_free_entry_chain",
    "interpret_startxref",
    "validate_trailer",
    "cross_check_xref",
    "validate_object",
    "validate_all_objects",
    "check_stream_lengths",
    "validate_pages",
    "check_encryption",
    "validate_document",
]

LOGGER = get_logger("pdfinspectx.validator")

_VERSION = re.compile(r"^\d+\.\d+$")
_HEX_DIGITS = re.compile(r"^[0-9A-Fa-f]+$")
FREE_HEAD_GENERATION = 65535

# Types assigned from the trailer rather than the schema catalog.
_TRAILER_ONLY_TYPES = frozenset({"Info", "Encrypt"})

# Content that an unencrypted file exposes to anyone who opens it.
_SENSITIVE_TYPES = frozenset({"Sig", "EmbeddedFile", "Filespec"})


@dataclass(slots=True)
class SectionResult:
    """Outcome of validating one of header, body, xref or trailer."""

    name: str
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, code: str, msg: str, detail: str = "") -> None:
        self.errors.append(Diagnostic(code, msg, detail))

    def warning(self, code: str, msg: str, detail: str = "") -> None:
        self.warnings.append(Diagnostic(code, msg, detail))


def _join(numbers: Any) -> str:
    return ", ".join(str(number) for number in numbers)


# -- Header ------------------------------------------------------------------


def validate_header(header: Header | None) -> SectionResult:
    result = SectionResult("header")
    if header is None or (header.version is None and not header.raw_content):
        result.error("HEADER_MISSING", "PDF header is missing", "The file must start with %PDF-x.y")
        return result
    if header.version is None or not _VERSION.match(header.version):
        result.error(
            "HEADER_VERSION_INVALID",
            "PDF version is not in the form major.minor",
            f"current version: {header.version}",
        )
    if "%PDF" not in header.raw_content:
        result.error("HEADER_PDF_MISSING", "Header does not contain %PDF", f"header line: {header.raw_content!r}")
    return result


# -- Body --------------------------------------------------------------------


def validate_body(document: Document) -> SectionResult:
    result = SectionResult("body")
    objects = document.physical.objects
    if not objects:
        result.error("BODY_NO_OBJECTS", "No indirect objects found", "The body must contain at least one object")
        return result

    invalid = [obj.object_number for obj in objects if not isinstance(obj.object_number, int) or obj.object_number < 0]
    if invalid:
        result.error(
            "BODY_INVALID_OBJECT_NUMBERS",
            f"{len(invalid)} objects have invalid object numbers",
            f"invalid numbers: {_join(invalid)}",
        )

    seen: set[int] = set()
    duplicates: list[int] = []
    for obj in objects:
        if obj.object_number in seen and obj.object_number not in duplicates:
            duplicates.append(obj.object_number)
        seen.add(obj.object_number)
    if duplicates:
        result.error(
            "BODY_DUPLICATE_OBJECT_NUMBERS",
            f"{len(duplicates)} object numbers are defined more than once",
            f"duplicate object numbers: {_join(duplicates)}",
        )
    return result


# -- Cross-reference table ---------------------------------------------------


def validate_free_entry_chain(entries: list[XRefEntry]) -> list[Diagnostic]:
    """Check the free list headed by object 0.

    The chain is followed from object 0 through ``next_free_object`` until
    it returns to 0.  Free entries never reached and not pointing back to 0
    with generation 65535 are reported as orphans.
    """

    errors: list[Diagnostic] = []
    by_number: dict[int, XRefEntry] = {}
    for entry in entries:
        by_number.setdefault(entry.object_number, entry)

    head = by_number.get(0)
    if head is None:
        errors.append(
            Diagnostic(
                "FREE_ENTRY_OBJECT0_MISSING",
                "Object 0 is not in the cross-reference table",
                "Object 0 must head the free entry list",
            )
        )
        return errors
    if head.in_use:
        errors.append(Diagnostic("FREE_ENTRY_OBJECT0_IN_USE", "Object 0 must be free", "Object 0 is marked in use"))
    if head.generation != FREE_HEAD_GENERATION:
        errors.append(
            Diagnostic(
                "FREE_ENTRY_OBJECT0_GENERATION",
                "Object 0 must have generation 65535",
                f"current generation: {head.generation}",
            )
        )

    visited: list[int] = []
    reached: set[int] = set()
    current: int | None = 0
    limit = len(entries)
    while current is not None:
        if current in reached:
            if current != 0:
                errors.append(
                    Diagnostic(
                        "FREE_ENTRY_CIRCULAR_CHAIN",
                        f"Free entry list loops at object {current}",
                        f"chain: {' -> '.join(str(n) for n in visited)} -> {current}",
                    )
                )
            break
        entry = by_number.get(current)
        if entry is None:
            errors.append(
                Diagnostic(
                    "FREE_ENTRY_OBJECT_MISSING",
                    f"Object {current} is not in the cross-reference table",
                    f"object {current} is linked from the free list but has no entry",
                )
            )
            break
        if len(visited) >= limit:
            errors.append(
                Diagnostic(
                    "FREE_ENTRY_INFINITE_LOOP",
                    "Free entry list is longer than the table",
                    f"chain length: {len(visited)}, entries: {limit}",
                )
            )
            break
        visited.append(current)
        reached.add(current)
        if entry.in_use:
            if current != 0:
                errors.append(
                    Diagnostic(
                        "FREE_ENTRY_OBJECT_IN_USE",
                        f"Object {current} is linked from the free list but marked in use",
                        f"object {current} has state 'n'",
                    )
                )
            break
        if current == 0:
            if entry.generation != FREE_HEAD_GENERATION:
                errors.append(
                    Diagnostic(
                        "FREE_ENTRY_OBJECT0_GENERATION_IN_CHAIN",
                        "Object 0 must have generation 65535",
                        f"current generation: {entry.generation}",
                    )
                )
        elif not 0 <= entry.generation <= FREE_HEAD_GENERATION:
            errors.append(
                Diagnostic(
                    "FREE_ENTRY_GENERATION_OUT_OF_RANGE",
                    f"Object {current} has generation {entry.generation} outside 0-65535",
                    f"object {current} generation is not usable",
                )
            )
        current = entry.next_free_object

    for entry in entries:
        if not entry.is_free or entry.object_number == 0 or entry.object_number in reached:
            continue
        if entry.next_free_object != 0 or entry.generation != FREE_HEAD_GENERATION:
            errors.append(
                Diagnostic(
                    "FREE_ENTRY_NOT_IN_CHAIN",
                    f"Object {entry.object_number} is free but not linked into the free list",
                    f"next free object: {entry.next_free_object}, generation: {entry.generation}",
                )
            )
    return errors


def validate_xref_structure(xref: XRefTable | None) -> tuple[SectionResult, list[Diagnostic]]:
    """Validate the table itself; returns the section and the free-list findings."""

    result = SectionResult("xref")
    if xref is None:
        result.error(
            "XREF_MISSING_OR_INVALID",
            "Cross-reference table is missing",
            "A classic xref section was not found",
        )
        return result, []
    if not xref.is_valid:
        detail = f"malformed lines: {len(xref.malformed_lines)}" if xref.malformed_lines else "no subsection header"
        result.error("XREF_INVALID_FORMAT", "Cross-reference table is malformed", detail)

    out_of_range = [e.object_number for e in xref.entries if not 0 <= e.generation <= FREE_HEAD_GENERATION]
    if out_of_range:
        result.error(
            "XREF_INVALID_ENTRIES",
            f"{len(out_of_range)} entries have a generation outside 0-65535",
            f"object numbers: {_join(out_of_range)}",
        )

    seen: set[int] = set()
    duplicates: list[int] = []
    for entry in xref.entries:
        if entry.object_number in seen and entry.object_number not in duplicates:
            duplicates.append(entry.object_number)
        seen.add(entry.object_number)
    if duplicates:
        result.error(
            "XREF_DUPLICATE_ENTRIES",
            f"{len(duplicates)} object numbers have more than one entry",
            f"duplicate object numbers: {_join(duplicates)}",
        )

    chain_errors = validate_free_entry_chain(xref.entries)
    if chain_errors:
        result.error(
            "XREF_FREE_ENTRY_CHAIN_ERRORS",
            f"{len(chain_errors)} free entry list errors",
            "The free entry list is not well formed",
        )
    return result, chain_errors


@dataclass(slots=True)
class XRefCheck:
    """Cross-check of xref entries against the objects found by scanning."""

    total_entries: int = 0
    valid_entries: int = 0
    missing_objects: list[int] = field(default_factory=list)
    offset_mismatches: list[dict[str, int]] = field(default_factory=list)
    generation_mismatches: list[dict[str, int]] = field(default_factory=list)
    missing_in_xref: list[int] = field(default_factory=list)
    free_but_present: list[int] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_entries": self.total_entries,
            "valid_entries": self.valid_entries,
            "missing_objects": list(self.missing_objects),
            "offset_mismatches": list(self.offset_mismatches),
            "generation_mismatches": list(self.generation_mismatches),
            "missing_in_xref": list(self.missing_in_xref),
            "free_but_present": list(self.free_but_present),
        }


def cross_check_xref(document: Document, config: InspectorConfig = DEFAULT_CONFIG) -> XRefCheck:
    check = XRefCheck()
    xref = document.xref
    if xref is None:
        return check
    check.total_entries = len(xref.entries)

    by_number: dict[int, PDFObject] = {}
    for obj in document.unique_objects():
        by_number[obj.object_number] = obj

    for entry in xref.entries:
        obj = by_number.get(entry.object_number)
        if entry.is_free:
            if obj is None:
                check.valid_entries += 1
            elif entry.object_number == 0:
                check.missing_objects.append(0)
            else:
                check.free_but_present.append(entry.object_number)
            continue
        if obj is None:
            check.missing_objects.append(entry.object_number)
            continue
        ok = True
        if entry.offset is not None:
            drift = abs(entry.offset - obj.offset)
            if drift > config.offset_tolerance:
                ok = False
                check.offset_mismatches.append(
                    {
                        "object_number": entry.object_number,
                        "xref_offset": entry.offset,
                        "actual_offset": obj.offset,
                        "difference": drift,
                    }
                )
        if obj.generation != entry.generation:
            ok = False
            check.generation_mismatches.append(
                {
                    "object_number": entry.object_number,
                    "xref_generation": entry.generation,
                    "actual_generation": obj.generation,
                }
            )
        if ok:
            check.valid_entries += 1

    listed = {entry.object_number for entry in xref.entries}
    check.missing_in_xref = sorted(number for number in by_number if number not in listed)

    if check.missing_objects:
        detail = f"missing object numbers: {_join(check.missing_objects)}"
        if 0 in check.missing_objects and by_number.get(0) is not None:
            detail += " (object 0 is the free list head but is defined in the body)"
        check.errors.append(
            Diagnostic(
                "XREF_MISSING_OBJECTS",
                f"{len(check.missing_objects)} xref entries do not match an object in the body",
                detail,
            )
        )
    if check.offset_mismatches:
        check.errors.append(
            Diagnostic(
                "XREF_OFFSET_MISMATCHES",
                f"{len(check.offset_mismatches)} object offsets differ from the xref",
                f"objects: {_join(item['object_number'] for item in check.offset_mismatches)}",
            )
        )
    if check.generation_mismatches:
        check.errors.append(
            Diagnostic(
                "XREF_GENERATION_MISMATCHES",
                f"{len(check.generation_mismatches)} object generations differ from the xref",
                f"objects: {_join(item['object_number'] for item in check.generation_mismatches)}",
            )
        )
    if check.missing_in_xref:
        check.warnings.append(
            Diagnostic(
                "XREF_MISSING_IN_XREF",
                f"{len(check.missing_in_xref)} objects are not listed in the xref: {_join(check.missing_in_xref)}",
                "Some body objects have no cross-reference entry",
            )
        )
    if check.free_but_present:
        check.warnings.append(
            Diagnostic(
                "XREF_FREE_OBJECT_PRESENT",
                f"{len(check.free_but_present)} free entries still have an object in the body",
                f"objects: {_join(check.free_but_present)}",
            )
        )
    return check


# -- Trailer -----------------------------------------------------------------


def interpret_startxref(
    raw: str,
    file_size: int,
    allow_hex: bool = True,
) -> tuple[int | None, Diagnostic | None]:
    """Read the ``startxref`` value.

    A decimal value inside the file is used as is.  When ``allow_hex`` is set
    a value that only fits as hexadecimal is accepted too; such files are
    suspect and the fallback is logged.
    """

    text = raw.strip()
    if text.startswith("-") and text[1:].isdigit():
        return None, Diagnostic("TRAILER_STARTXREF_NEGATIVE", "startxref is negative", f"value: {text}")
    if text.isdigit() and int(text) < file_size:
        return int(text), None
    if allow_hex and _HEX_DIGITS.match(text):
        value = int(text, 16)
        if value < file_size:
            LOGGER.warning("startxref %r only fits the file when read as hexadecimal (%d)", text, value)
            return value, None
    if text.isdigit() or (allow_hex and _HEX_DIGITS.match(text)):
        return None, Diagnostic(
            "TRAILER_STARTXREF_OUT_OF_RANGE",
            "startxref points past the end of the file",
            f"value: {text}, file size: {file_size}",
        )
    return None, Diagnostic("TRAILER_STARTXREF_FORMAT_INVALID", "startxref is not a number", f"value: {text!r}")


def _is_id_string(value: Any) -> bool:
    if isinstance(value, HexString):
        return bool(value.digits)
    return isinstance(value, PDFString) and len(value) > 0


def validate_trailer(document: Document, config: InspectorConfig = DEFAULT_CONFIG) -> SectionResult:
    result = SectionResult("trailer")
    trailer: Trailer | None = document.trailer
    if trailer is None:
        result.error("TRAILER_MISSING", "Trailer is missing", "No trailer or startxref keyword was found")
        return result
    props = trailer.properties
    if trailer.start_position is not None and not trailer.is_valid:
        result.error("TRAILER_FORMAT_INVALID", "Trailer dictionary could not be parsed", trailer.raw_content[:80])

    for key in ("Root", "Size"):
        if key not in props:
            result.error("TRAILER_MISSING_REQUIRED_PROP", f"Trailer is missing /{key}", f"/{key} is required")

    if "Root" in props and document.resolve(props["Root"]) is None:
        result.error("TRAILER_ROOT_REF_INVALID", "Trailer /Root does not resolve", f"/Root: {props['Root']}")

    if "Size" in props:
        size = props["Size"]
        if not isinstance(size, int) or isinstance(size, bool):
            result.error("TRAILER_SIZE_TYPE_INVALID", "Trailer /Size is not an integer", f"/Size: {size!r}")
        else:
            highest = document.max_object_number()
            expected = highest + 1 if highest is not None else 0
            if size != expected:
                result.error(
                    "TRAILER_SIZE_INCORRECT",
                    f"Trailer /Size is {size}, expected {expected}",
                    f"current: {size}, expected: {expected}",
                )

    if trailer.startxref_raw is None:
        result.error("TRAILER_STARTXREF_MISSING", "startxref is missing", "The file must end with startxref")
    else:
        offset, problem = interpret_startxref(
            trailer.startxref_raw, document.physical.file_size, config.hex_startxref
        )
        if problem is not None:
            result.errors.append(problem)
        elif document.xref is None or document.xref.start_position is None:
            result.error(
                "TRAILER_STARTXREF_NO_XREF_POS",
                "startxref cannot be checked",
                "No xref keyword position was recorded",
            )
        elif offset != document.xref.start_position:
            result.error(
                "TRAILER_STARTXREF_MISMATCH",
                "startxref does not point at the xref keyword",
                f"startxref: {offset}, xref found at: {document.xref.start_position}",
            )

    if not trailer.has_eof:
        result.warning("TRAILER_EOF_MISSING", "%%EOF marker is missing", "The file may be truncated")

    if "Info" in props and document.resolve(props["Info"]) is None:
        result.error("TRAILER_INFO_REF_INVALID", "Trailer /Info does not resolve", f"/Info: {props['Info']}")

    if "ID" in props:
        identifier = props["ID"]
        if not isinstance(identifier, list) or len(identifier) != 2:
            result.error("TRAILER_ID_TYPE_INVALID", "Trailer /ID must be an array of two strings", f"/ID: {identifier!r}")
        elif not all(_is_id_string(item) for item in identifier):
            result.error("TRAILER_ID_FORMAT_INVALID", "Trailer /ID elements must be non-empty strings", f"/ID: {identifier!r}")

    if "Encrypt" in props:
        if document.resolve(props["Encrypt"]) is None:
            result.error(
                "TRAILER_ENCRYPT_REF_INVALID",
                "Trailer /Encrypt does not resolve",
                f"/Encrypt: {props['Encrypt']}",
            )
        if "ID" not in props:
            result.error("TRAILER_ENCRYPT_NO_ID", "Encrypted files must carry /ID", "/Encrypt present without /ID")
    return result


# -- Objects -----------------------------------------------------------------


@dataclass(slots=True)
class ObjectCheck:
    object_number: int
    generation: int
    type_tag: str
    subtype: str | None = None
    subtype_description: str | None = None
    missing_required: list[str] = field(default_factory=list)
    unknown_type: bool = False
    unknown_subtype: bool = False
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing_required and not any(
            item.code == "OBJECT_INVALID_PROPERTY_NAME" for item in self.warnings
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_number": self.object_number,
            "generation": self.generation,
            "type": self.type_tag,
            "subtype": self.subtype,
            "is_valid": self.is_valid,
            "missing_required": list(self.missing_required),
            "unknown_type": self.unknown_type,
            "unknown_subtype": self.unknown_subtype,
            "errors": [item.to_dict() for item in self.errors],
            "warnings": [item.to_dict() for item in self.warnings],
        }


def validate_object(obj: PDFObject) -> ObjectCheck:
    """Check ``obj`` against the required properties of its type or subtype."""

    check = ObjectCheck(obj.object_number, obj.generation, obj.type_tag, subtype=obj.subtype)
    props = obj.properties
    spec = type_spec(obj.type_tag)
    if spec is None:
        check.unknown_type = obj.type_tag not in _TRAILER_ONLY_TYPES
        for key in props:
            if not isinstance(key, str) or not key:
                check.warnings.append(
                    Diagnostic(
                        "OBJECT_INVALID_PROPERTY_NAME",
                        f"Invalid property name {key!r}",
                        f"object {obj.object_number} {obj.generation} has an empty or non-name key",
                    )
                )
        return check

    required: tuple[str, ...] = spec.required
    if obj.subtype is not None and obj.type_tag in SUBTYPE_MAP:
        sub = subtype_spec(obj.type_tag, obj.subtype)
        if sub is None:
            check.unknown_subtype = True
            check.errors.append(
                Diagnostic(
                    "OBJECT_UNKNOWN_SUBTYPE",
                    f"Unknown subtype {obj.type_tag}/{obj.subtype}",
                    f"object {obj.object_number} {obj.generation} has an unrecognised /Subtype",
                )
            )
        else:
            check.subtype_description = sub.description
            required = sub.required

    check.missing_required = [key for key in required if key not in props]
    if check.missing_required:
        check.errors.append(
            Diagnostic(
                "OBJECT_MISSING_REQUIRED_PROPS",
                f"Object {obj.object_number} {obj.generation} ({obj.type_tag}) is missing: "
                f"{', '.join(check.missing_required)}",
                f"object {obj.object_number} lacks required properties",
            )
        )
    return check


def _tally(table: dict[str, dict[str, int]], key: str, valid: bool) -> None:
    counts = table.setdefault(key, {"total": 0, "valid": 0, "invalid": 0})
    counts["total"] += 1
    counts["valid" if valid else "invalid"] += 1


def validate_all_objects(document: Document) -> tuple[dict[str, Any], list[Diagnostic], list[Diagnostic]]:
    """Validate every object; returns the report plus its errors and warnings."""

    report: dict[str, Any] = {
        "total": 0,
        "valid": 0,
        "invalid": 0,
        "unknown_types": 0,
        "unknown_subtypes": 0,
        "type_stats": {},
        "subtype_stats": {},
        "results": [],
    }
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
    for obj in document.unique_objects():
        check = validate_object(obj)
        report["total"] += 1
        report["valid" if check.is_valid else "invalid"] += 1
        report["unknown_types"] += int(check.unknown_type)
        report["unknown_subtypes"] += int(check.unknown_subtype)
        _tally(report["type_stats"], obj.type_tag, check.is_valid)
        if check.subtype is not None and not check.unknown_type:
            _tally(report["subtype_stats"], f"{obj.type_tag}/{check.subtype}", check.is_valid)
        report["results"].append(check.to_dict())
        errors.extend(check.errors)
        warnings.extend(check.warnings)
    return report, errors, warnings


def _declared_length(document: Document, value: Any) -> int | None:
    target = document.resolve(value)
    if target is not None:
        value = target.value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def check_stream_lengths(document: Document) -> list[Diagnostic]:
    """Compare each stream's ``/Length`` with the payload actually captured."""

    warnings: list[Diagnostic] = []
    for obj in document.unique_objects():
        if obj.stream is None or "Length" not in obj.properties:
            continue
        declared = _declared_length(document, obj.properties["Length"])
        if declared is None or declared == obj.stream.length:
            continue
        warnings.append(
            Diagnostic(
                "STREAM_LENGTH_MISMATCH",
                f"Stream {obj.object_number} {obj.generation} declares /Length {declared} "
                f"but {obj.stream.length} bytes were found",
                "The payload between stream and endstream differs from /Length",
            )
        )
    return warnings


# -- Pages and encryption ----------------------------------------------------


def _inherited(document: Document, obj: PDFObject, key: str) -> Any:
    """Look ``key`` up on ``obj`` and then along its /Parent chain."""

    seen: set[tuple[int, int]] = set()
    current: PDFObject | None = obj
    while current is not None and current.identity not in seen:
        if key in current.properties:
            return current.properties[key]
        seen.add(current.identity)
        current = document.resolve(current.properties.get("Parent"))
    return None


def validate_pages(document: Document) -> list[Diagnostic]:
    """Advisory checks on each page: rotation, resources and content."""

    warnings: list[Diagnostic] = []
    for page in document.find_objects_by_type("Page"):
        label = f"Page {page.object_number} {page.generation}"
        rotate = _inherited(document, page, "Rotate")
        if rotate is not None:
            if isinstance(rotate, bool) or not isinstance(rotate, (int, float)):
                warnings.append(
                    Diagnostic("PAGE_ROTATION_INVALID", f"{label} has a non-numeric /Rotate", f"/Rotate: {rotate!r}")
                )
            elif rotate % 90 != 0:
                warnings.append(
                    Diagnostic(
                        "PAGE_ROTATION_NONSTANDARD",
                        f"{label} is rotated by {rotate} degrees",
                        "/Rotate should be a multiple of 90",
                    )
                )
        if _inherited(document, page, "Resources") is None:
            warnings.append(
                Diagnostic(
                    "PAGE_RESOURCES_MISSING",
                    f"{label} has no resource dictionary",
                    "Neither the page nor its ancestors define /Resources",
                )
            )
        if "Contents" not in page.properties:
            warnings.append(
                Diagnostic("PAGE_CONTENTS_MISSING", f"{label} has no content stream", "The page will render blank")
            )
    return warnings


def _sensitive_features(document: Document) -> list[str]:
    found: list[str] = []
    for obj in document.unique_objects():
        props = obj.properties
        if obj.type_tag in _SENSITIVE_TYPES:
            label = obj.type_tag
        elif obj.type_tag == "Catalog" and "AcroForm" in props:
            label = "AcroForm"
        elif obj.subtype == "Widget" or "FT" in props:
            label = "form field"
        elif props.get("S") == "JavaScript" or "JS" in props:
            label = "JavaScript"
        else:
            continue
        if label not in found:
            found.append(label)
    return found


def check_encryption(document: Document) -> list[Diagnostic]:
    trailer = document.trailer
    if trailer is not None and "Encrypt" in trailer.properties:
        return [
            Diagnostic(
                "DOCUMENT_ENCRYPTED",
                "Document is encrypted",
                "Strings and streams cannot be inspected without decryption",
            )
        ]
    features = _sensitive_features(document)
    if features:
        return [
            Diagnostic(
                "UNENCRYPTED_SENSITIVE_CONTENT",
                "Document is not encrypted but carries sensitive content",
                "found: " + ", ".join(features),
            )
        ]
    return []


# -- Entry point -------------------------------------------------------------


def validate_document(document: Document, config: InspectorConfig | None = None) -> Document:
    """Fill ``document.validation`` from scratch and return the document."""

    config = config or DEFAULT_CONFIG
    validation = document.validation
    validation.errors = []
    validation.warnings = []

    xref_section, chain_errors = validate_xref_structure(document.xref)
    sections = [
        validate_header(document.header),
        validate_body(document),
        xref_section,
        validate_trailer(document, config),
    ]
    validation.sections = {section.name: section.is_valid for section in sections}
    for section in sections:
        validation.errors.extend(section.errors)
        validation.warnings.extend(section.warnings)
    validation.errors.extend(chain_errors)
    if not all(section.is_valid for section in sections):
        validation.warning(
            "STRUCTURE_VALIDATION_FAILED",
            "PDF file structure has problems",
            "invalid sections: " + ", ".join(s.name for s in sections if not s.is_valid),
        )

    report, object_errors, object_warnings = validate_all_objects(document)
    validation.object_report = report
    validation.errors.extend(object_errors)
    validation.warnings.extend(object_warnings)
    if report["unknown_types"]:
        validation.warning(
            "UNKNOWN_OBJECT_TYPES",
            f"{report['unknown_types']} objects have an unknown type",
            "Some objects carry no recognised /Type",
        )

    required = check_required_objects(document)
    if not required["has_catalog"]:
        validation.error("MISSING_CATALOG", "No Catalog object", "The document root must be a Catalog")
    if not required["has_pages"]:
        validation.error("MISSING_PAGES", "No Pages object", "A page tree root is required")

    invalid_refs = [edge for edge in document.relations.references if not edge.valid]
    if invalid_refs:
        validation.warning(
            "INVALID_REFERENCES",
            f"{len(invalid_refs)} references point at missing objects",
            "targets: " + ", ".join(f"{e.target[0]} {e.target[1]} R" for e in invalid_refs[:20]),
        )
    cycles = document.relations.cycles
    if cycles:
        validation.warning(
            "CIRCULAR_REFERENCES",
            f"{len(cycles)} circular reference chains found",
            "; ".join(" -> ".join(f"{n[0]} {n[1]} R" for n in cycle.nodes) for cycle in cycles[:10]),
        )
    if not required["has_page_objects"]:
        validation.warning("NO_PAGE_OBJECTS", "No Page objects found", "The file may have no page content")
    if not content_stats(document)["fonts"]:
        validation.warning("NO_FONT_OBJECTS", "No Font objects found", "The file may have no text content")
    validation.warnings.extend(validate_pages(document))
    validation.warnings.extend(check_encryption(document))

    unterminated = [obj for obj in document.physical.objects if not obj.has_endobj]
    if unterminated:
        validation.warning(
            "OBJECT_MISSING_ENDOBJ",
            f"{len(unterminated)} objects have no endobj",
            "objects: " + ", ".join(f"{o.object_number} {o.generation}" for o in unterminated),
        )
    if config.check_stream_length:
        validation.warnings.extend(check_stream_lengths(document))

    xref_check = cross_check_xref(document, config)
    validation.object_report["xref"] = xref_check.to_dict()
    validation.errors.extend(xref_check.errors)
    validation.warnings.extend(xref_check.warnings)

    validation.is_valid = not validation.errors
    LOGGER.debug(
        "Validation finished: %d errors, %d warnings", len(validation.errors), len(validation.warnings)
    )
    return document
