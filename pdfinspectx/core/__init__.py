"""Scanner, document model, analyser and validator."""

from __future__ import annotations

from .analyser import Analyser, build_hierarchy, detect_cycles, extract_references
from .model import Diagnostic, Document, EdgeKind, PDFObject, ReferenceEdge
from .parser import PDFParser
from .validator import validate_document
from .values import HexString, Name, PDFString, Reference, UnknownValue

__all__ = [
    "Analyser",
    "build_hierarchy",
    "detect_cycles",
    "extract_references",
    "Diagnostic",
    "Document",
    "EdgeKind",
    "PDFObject",
    "ReferenceEdge",
    "PDFParser",
    "validate_document",
    "HexString",
    "Name",
    "PDFString",
    "Reference",
    "UnknownValue",
]
