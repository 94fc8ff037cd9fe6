"""Document model produced by the scanner and completed by the analyser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .values import Reference, to_jsonable

__all__ = [
    "Identity",
    "StreamPayload",
    "PDFObject",
    "Header",
    "XRefState",
    "XRefEntry",
    "XRefTable",
    "Trailer",
    "EdgeKind",
    "NON_CYCLIC_KINDS",
    "ReferenceEdge",
    "Diagnostic",
    "HierarchyNode",
    "HierarchyTree",
    "Cycle",
    "PhysicalSection",
    "LogicalSection",
    "RelationsSection",
    "StatsSection",
    "ValidationSection",
    "Document",
]

Identity = tuple[int, int]

_MISSING = object()


def _identity_text(identity: Identity | None) -> str | None:
    if identity is None:
        return None
    return f"{identity[0]} {identity[1]} R"


# -- Physical structures -----------------------------------------------------


@dataclass(slots=True)
class StreamPayload:
    """Raw bytes found between ``stream`` and ``endstream``."""

    data: bytes
    length: int

    def to_dict(self) -> dict[str, Any]:
        return {"length": self.length}


@dataclass(slots=True)
class PDFObject:
    """An indirect object recovered from the byte stream."""

    object_number: int
    generation: int
    offset: int
    raw_content: str
    type_tag: str = "Unknown"
    properties: dict[str, Any] = field(default_factory=dict)
    value: Any = None
    stream: StreamPayload | None = None
    enrichment: dict[str, Any] = field(default_factory=dict)
    has_endobj: bool = True

    @property
    def identity(self) -> Identity:
        return (self.object_number, self.generation)

    @property
    def reference(self) -> Reference:
        return Reference(self.object_number, self.generation)

    @property
    def subtype(self) -> str | None:
        subtype = self.properties.get("Subtype")
        return str(subtype) if subtype is not None else None

    @property
    def is_stream(self) -> bool:
        return self.stream is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_number": self.object_number,
            "generation": self.generation,
            "offset": self.offset,
            "type": self.type_tag,
            "properties": to_jsonable(self.properties),
            "value": to_jsonable(self.value),
            "stream": self.stream.to_dict() if self.stream else None,
            "enrichment": to_jsonable(self.enrichment),
            "has_endobj": self.has_endobj,
        }


@dataclass(slots=True)
class Header:
    """``%PDF-x.y`` header line."""

    version: str | None = None
    raw_content: str = ""
    is_valid: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "raw_content": self.raw_content, "is_valid": self.is_valid}


class XRefState(str, Enum):
    IN_USE = "n"
    FREE = "f"


@dataclass(slots=True)
class XRefEntry:
    """One 20-byte record of a classic cross-reference table.

    ``offset`` is set for in-use entries, ``next_free_object`` for free ones.
    """

    object_number: int
    generation: int
    state: XRefState
    offset: int | None = None
    next_free_object: int | None = None

    @property
    def in_use(self) -> bool:
        return self.state is XRefState.IN_USE

    @property
    def is_free(self) -> bool:
        return self.state is XRefState.FREE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "object_number": self.object_number,
            "generation": self.generation,
            "state": "in_use" if self.in_use else "free",
        }
        if self.in_use:
            data["offset"] = self.offset
        else:
            data["next_free_object"] = self.next_free_object
        return data


@dataclass(slots=True)
class XRefTable:
    entries: list[XRefEntry] = field(default_factory=list)
    subsections: list[tuple[int, int]] = field(default_factory=list)
    start_position: int | None = None
    raw_content: str = ""
    is_valid: bool = False
    malformed_lines: list[str] = field(default_factory=list)

    def entry_for(self, object_number: int) -> XRefEntry | None:
        for entry in self.entries:
            if entry.object_number == object_number:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "subsections": [list(item) for item in self.subsections],
            "start_position": self.start_position,
            "is_valid": self.is_valid,
            "malformed_lines": list(self.malformed_lines),
        }


@dataclass(slots=True)
class Trailer:
    properties: dict[str, Any] = field(default_factory=dict)
    startxref: int | None = None
    startxref_raw: str | None = None
    has_eof: bool = False
    start_position: int | None = None
    raw_content: str = ""
    is_valid: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "properties": to_jsonable(self.properties),
            "startxref": self.startxref,
            "has_eof": self.has_eof,
            "start_position": self.start_position,
            "is_valid": self.is_valid,
        }


# -- Relations ---------------------------------------------------------------


class EdgeKind(str, Enum):
    HIERARCHY_ROOT = "hierarchy_root"
    HIERARCHY_PARENT = "hierarchy_parent"
    HIERARCHY_CHILD = "hierarchy_child"
    HIERARCHY_SIBLING = "hierarchy_sibling"
    CONTENT = "content"
    RESOURCE = "resource"
    FONT = "font"
    XOBJECT = "xobject"
    GRAPHICS_STATE = "graphics_state"
    ANNOTATION = "annotation"
    PAGE_BOX = "page_box"
    ACTION = "action"
    GENERAL = "general"


# Expected structural links, ignored by cycle detection.
NON_CYCLIC_KINDS = frozenset(
    {
        EdgeKind.HIERARCHY_ROOT,
        EdgeKind.HIERARCHY_PARENT,
        EdgeKind.HIERARCHY_CHILD,
        EdgeKind.HIERARCHY_SIBLING,
        EdgeKind.ACTION,
    }
)


@dataclass(slots=True)
class ReferenceEdge:
    source: Identity
    target: Identity
    path: str
    kind: EdgeKind
    valid: bool
    source_type: str = "Unknown"
    target_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": _identity_text(self.source),
            "target": _identity_text(self.target),
            "path": self.path,
            "kind": self.kind.value,
            "valid": self.valid,
            "source_type": self.source_type,
            "target_type": self.target_type,
        }


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """A single validation finding."""

    code: str
    msg: str
    detail: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "msg": self.msg, "detail": self.detail}


@dataclass(slots=True)
class HierarchyNode:
    identity: Identity
    type_tag: str
    depth: int
    path: str = ""
    children: list[Identity] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ref": _identity_text(self.identity),
            "type": self.type_tag,
            "path": self.path,
            "children": [_identity_text(child) for child in self.children],
        }


@dataclass(slots=True)
class HierarchyTree:
    root: Identity | None = None
    levels: list[list[HierarchyNode]] = field(default_factory=list)
    max_depth: int = 0

    def nodes(self) -> Iterator[HierarchyNode]:
        for level in self.levels:
            yield from level

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": _identity_text(self.root),
            "levels": [[node.to_dict() for node in level] for level in self.levels],
            "max_depth": self.max_depth,
        }


@dataclass(slots=True)
class Cycle:
    """Closed walk over non-hierarchical edges; first and last node match."""

    nodes: list[Identity]
    edges: list[ReferenceEdge]

    @property
    def members(self) -> frozenset[Identity]:
        return frozenset(self.nodes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle": [_identity_text(node) for node in self.nodes],
            "paths": [edge.path for edge in self.edges],
            "edges": [edge.to_dict() for edge in self.edges],
        }


# -- Document sections -------------------------------------------------------


@dataclass(slots=True)
class PhysicalSection:
    header: Header = field(default_factory=Header)
    objects: list[PDFObject] = field(default_factory=list)
    index: dict[Identity, PDFObject] = field(default_factory=dict)
    xref: XRefTable | None = None
    trailer: Trailer | None = None
    file_size: int = 0

    @property
    def version(self) -> str | None:
        return self.header.version


@dataclass(slots=True)
class LogicalSection:
    catalog: Identity | None = None
    pages: list[Identity] = field(default_factory=list)
    page_objects: list[Identity] = field(default_factory=list)
    outlines: list[Identity] = field(default_factory=list)
    fonts: list[Identity] = field(default_factory=list)
    streams: list[Identity] = field(default_factory=list)
    xobjects: list[Identity] = field(default_factory=list)
    images: list[Identity] = field(default_factory=list)
    annotations: list[Identity] = field(default_factory=list)
    actions: list[Identity] = field(default_factory=list)
    destinations: list[Identity] = field(default_factory=list)
    metadata: list[Identity] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "catalog": _identity_text(self.catalog),
            **{
                name: [_identity_text(item) for item in getattr(self, name)]
                for name in (
                    "pages",
                    "page_objects",
                    "outlines",
                    "fonts",
                    "streams",
                    "xobjects",
                    "images",
                    "annotations",
                    "actions",
                    "destinations",
                    "metadata",
                )
            },
        }


@dataclass(slots=True)
class RelationsSection:
    references: list[ReferenceEdge] = field(default_factory=list)
    referenced_by: dict[Identity, list[ReferenceEdge]] = field(default_factory=dict)
    hierarchy: HierarchyTree = field(default_factory=HierarchyTree)
    cycles: list[Cycle] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "references": [edge.to_dict() for edge in self.references],
            "referenced_by": {
                _identity_text(target): [edge.to_dict() for edge in edges]
                for target, edges in self.referenced_by.items()
            },
            "hierarchy": self.hierarchy.to_dict(),
            "circular_refs": [cycle.to_dict() for cycle in self.cycles],
        }


@dataclass(slots=True)
class StatsSection:
    total_objects: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    reference_counts: dict[str, int] = field(
        default_factory=lambda: {"total": 0, "valid": 0, "invalid": 0, "circular": 0}
    )
    stream_stats: dict[str, int] = field(
        default_factory=lambda: {"total": 0, "total_size": 0, "compressed": 0, "uncompressed": 0}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_objects": self.total_objects,
            "type_counts": dict(self.type_counts),
            "reference_counts": dict(self.reference_counts),
            "stream_stats": dict(self.stream_stats),
        }


@dataclass(slots=True)
class ValidationSection:
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)
    sections: dict[str, bool] = field(default_factory=dict)
    object_report: dict[str, Any] = field(default_factory=dict)
    is_valid: bool = False

    def error(self, code: str, msg: str, detail: str = "") -> Diagnostic:
        diagnostic = Diagnostic(code, msg, detail)
        self.errors.append(diagnostic)
        return diagnostic

    def warning(self, code: str, msg: str, detail: str = "") -> Diagnostic:
        diagnostic = Diagnostic(code, msg, detail)
        self.warnings.append(diagnostic)
        return diagnostic

    def codes(self) -> set[str]:
        return {item.code for item in self.errors} | {item.code for item in self.warnings}

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "sections": dict(self.sections),
            "errors": [item.to_dict() for item in self.errors],
            "warnings": [item.to_dict() for item in self.warnings],
            "object_report": to_jsonable(self.object_report),
        }


# -- Aggregate ---------------------------------------------------------------


class Document:
    """Owns every parsed object together with the derived sections.

    A document is filled once by the scanner and once by the analyser.  To
    reuse an instance call :meth:`reset`, which clears every section.
    """

    def __init__(self) -> None:
        self.physical = PhysicalSection()
        self.logical = LogicalSection()
        self.relations = RelationsSection()
        self.stats = StatsSection()
        self.validation = ValidationSection()
        self.analysed = False

    def __repr__(self) -> str:
        return (
            f"Document(version={self.version!r}, objects={len(self.physical.objects)}, "
            f"analysed={self.analysed})"
        )

    # Object store -------------------------------------------------------

    @property
    def objects(self) -> tuple[PDFObject, ...]:
        return tuple(self.physical.objects)

    @property
    def version(self) -> str | None:
        return self.physical.version

    @property
    def header(self) -> Header:
        return self.physical.header

    @property
    def xref(self) -> XRefTable | None:
        return self.physical.xref

    @property
    def trailer(self) -> Trailer | None:
        return self.physical.trailer

    def add_object(self, obj: PDFObject) -> bool:
        """Store ``obj``; returns ``False`` when its identity was already indexed.

        Every scanned object is kept in order so duplicates stay visible to
        validation; the index always points at the latest definition.
        """

        replaced = obj.identity in self.physical.index
        self.physical.objects.append(obj)
        self.physical.index[obj.identity] = obj
        return not replaced

    def get_object(self, object_number: int, generation: int = 0) -> PDFObject | None:
        return self.physical.index.get((object_number, generation))

    def get_object_by_reference_text(self, text: str) -> PDFObject | None:
        reference = Reference.from_text(text)
        if reference is None:
            return None
        return self.get_object(reference.object_number, reference.generation)

    def resolve(self, value: Any) -> PDFObject | None:
        if isinstance(value, Reference):
            return self.get_object(value.object_number, value.generation)
        return None

    def unique_objects(self) -> list[PDFObject]:
        """Objects in scan order with later redefinitions taking their slot."""

        seen: set[Identity] = set()
        result: list[PDFObject] = []
        for obj in self.physical.objects:
            if obj.identity in seen:
                continue
            seen.add(obj.identity)
            result.append(self.physical.index[obj.identity])
        return result

    def find_objects_by_type(self, type_tag: str) -> list[PDFObject]:
        return [obj for obj in self.unique_objects() if obj.type_tag == type_tag]

    def find_objects_by_property(self, key: str, value: Any = _MISSING) -> list[PDFObject]:
        matches = []
        for obj in self.unique_objects():
            if key not in obj.properties:
                continue
            if value is _MISSING or obj.properties[key] == value:
                matches.append(obj)
        return matches

    def max_object_number(self) -> int | None:
        if not self.physical.objects:
            return None
        return max(obj.object_number for obj in self.physical.objects)

    # Lifecycle ----------------------------------------------------------

    def reset(self) -> None:
        """Drop every section so the instance can hold a new parse."""

        self.physical = PhysicalSection()
        self.logical = LogicalSection()
        self.relations = RelationsSection()
        self.stats = StatsSection()
        self.validation = ValidationSection()
        self.analysed = False

    def to_dict(self) -> dict[str, Any]:
        physical = self.physical
        return {
            "physical": {
                "header": physical.header.to_dict(),
                "version": physical.version,
                "file_size": physical.file_size,
                "objects": [obj.to_dict() for obj in physical.objects],
                "xref": physical.xref.to_dict() if physical.xref else None,
                "trailer": physical.trailer.to_dict() if physical.trailer else None,
            },
            "logical": self.logical.to_dict(),
            "relations": self.relations.to_dict(),
            "stats": self.stats.to_dict(),
            "validation": self.validation.to_dict(),
        }
