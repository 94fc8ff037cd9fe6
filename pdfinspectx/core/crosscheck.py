"""Compare the scanner's view of a file with pypdf's reader."""

from __future__ import annotations

from dataclasses import dataclass, field
import io
from typing import Any

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from pypdf.generic import IndirectObject

from .lookups import content_stats
from .model import Document
from .utils import get_logger
from .values import Reference

__all__ = ["CrossCheckResult", "cross_check_with_pypdf"]

LOGGER = get_logger("pdfinspectx.crosscheck")


@dataclass(slots=True)
class CrossCheckResult:
    """Field by field comparison; ``mismatches`` names the fields that differ."""

    scanner: dict[str, Any] = field(default_factory=dict)
    reference: dict[str, Any] = field(default_factory=dict)
    mismatches: list[str] = field(default_factory=list)
    reference_error: str | None = None

    @property
    def agrees(self) -> bool:
        return self.reference_error is None and not self.mismatches

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanner": dict(self.scanner),
            "reference": dict(self.reference),
            "mismatches": list(self.mismatches),
            "reference_error": self.reference_error,
            "agrees": self.agrees,
        }


def _scanner_view(document: Document) -> dict[str, Any]:
    trailer = document.trailer
    props = trailer.properties if trailer else {}
    root = props.get("Root")
    size = props.get("Size")
    return {
        "version": document.version,
        "pages": content_stats(document)["pages"],
        "root": str(root) if isinstance(root, Reference) else None,
        "size": size if isinstance(size, int) else None,
    }


def _reader_view(reader: PdfReader) -> dict[str, Any]:
    header = reader.pdf_header or ""
    root = reader.trailer.raw_get("/Root") if "/Root" in reader.trailer else None
    size = reader.trailer.get("/Size")
    return {
        "version": header[5:] if header.startswith("%PDF-") else None,
        "pages": len(reader.pages),
        "root": f"{root.idnum} {root.generation} R" if isinstance(root, IndirectObject) else None,
        "size": int(size) if size is not None else None,
    }


def cross_check_with_pypdf(document: Document, data: bytes) -> CrossCheckResult:
    """Read ``data`` with :class:`pypdf.PdfReader` and compare with ``document``.

    A file pypdf cannot open is reported through ``reference_error`` rather
    than raised, so damaged files still produce a result.
    """

    result = CrossCheckResult(scanner=_scanner_view(document))
    try:
        reader = PdfReader(io.BytesIO(data))
        result.reference = _reader_view(reader)
    except PdfReadError as exc:
        LOGGER.warning("pypdf could not read the file: %s", exc)
        result.reference_error = str(exc)
        return result

    result.mismatches = [
        key for key in ("version", "pages", "root", "size") if result.scanner.get(key) != result.reference.get(key)
    ]
    if result.mismatches:
        LOGGER.debug("Scanner and pypdf disagree on: %s", ", ".join(result.mismatches))
    return result
