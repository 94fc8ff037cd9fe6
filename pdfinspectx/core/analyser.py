"""Reference graph, cycle detection and logical hierarchy."""

from __future__ import annotations

from typing import Any, Iterator
import re

from ..config import DEFAULT_CONFIG, InspectorConfig
from ..exceptions import ResourceExceeded
from .lookups import stream_stats, type_stats
from .model import (
    NON_CYCLIC_KINDS,
    Cycle,
    Document,
    EdgeKind,
    HierarchyNode,
    HierarchyTree,
    Identity,
    PDFObject,
    ReferenceEdge,
)
from .utils import get_logger
from .values import Reference

__all__ = [
    "walk_references",
    "classify_edge",
    "extract_references",
    "detect_cycles",
    "is_child_relationship",
    "find_child_objects",
    "build_hierarchy",
    "populate_logical",
    "compute_stats",
    "Analyser",
]

LOGGER = get_logger("pdfinspectx.analyser")

_INDEX_SUFFIX = re.compile(r"\[\d+\]")


# -- Reference walking -------------------------------------------------------


def walk_references(value: Any, path: str = "") -> Iterator[tuple[str, Reference]]:
    """Yield ``(path, reference)`` for every reference nested in ``value``.

    Paths use ``Key.Sub`` for dictionaries and ``Key[i]`` for arrays.
    """

    stack: list[tuple[Any, str]] = [(value, path)]
    while stack:
        current, current_path = stack.pop()
        if isinstance(current, Reference):
            yield current_path, current
        elif isinstance(current, dict):
            items = list(current.items())
            for key, item in reversed(items):
                stack.append((item, f"{current_path}.{key}" if current_path else str(key)))
        elif isinstance(current, list):
            for index in range(len(current) - 1, -1, -1):
                stack.append((current[index], f"{current_path}[{index}]"))


def _strip_indices(path: str) -> str:
    return _INDEX_SUFFIX.sub("", path)


def classify_edge(path: str) -> EdgeKind:
    """Map the property path of a reference to its semantic edge kind."""

    key = _strip_indices(path)
    if key == "Pages":
        return EdgeKind.HIERARCHY_ROOT
    if key == "Kids" or path.startswith("K["):
        return EdgeKind.HIERARCHY_CHILD
    if key in ("Parent", "P"):
        return EdgeKind.HIERARCHY_PARENT
    if key == "Contents":
        return EdgeKind.CONTENT
    if key == "Resources":
        return EdgeKind.RESOURCE
    if "Font" in path:
        return EdgeKind.FONT
    if "XObject" in path:
        return EdgeKind.XOBJECT
    if "ExtGState" in path:
        return EdgeKind.GRAPHICS_STATE
    if "Annots" in path:
        return EdgeKind.ANNOTATION
    if "MediaBox" in path or "CropBox" in path:
        return EdgeKind.PAGE_BOX
    if key == "K":
        return EdgeKind.HIERARCHY_CHILD
    if key == "ParentTree":
        return EdgeKind.HIERARCHY_PARENT
    if key in ("First", "Last", "Next", "Prev"):
        return EdgeKind.HIERARCHY_SIBLING
    if key in ("Fields", "OCGs"):
        return EdgeKind.HIERARCHY_CHILD
    if key in ("A", "Dest", "D", "F"):
        return EdgeKind.ACTION
    return EdgeKind.GENERAL


def extract_references(document: Document) -> list[ReferenceEdge]:
    """Collect every reference edge and fill the referenced-by map."""

    relations = document.relations
    relations.references = []
    relations.referenced_by = {}
    for obj in document.unique_objects():
        for path, reference in walk_references(obj.properties):
            target = document.resolve(reference)
            edge = ReferenceEdge(
                source=obj.identity,
                target=reference.identity,
                path=path,
                kind=classify_edge(path),
                valid=target is not None,
                source_type=obj.type_tag,
                target_type=target.type_tag if target is not None else None,
            )
            relations.references.append(edge)
            if edge.valid:
                relations.referenced_by.setdefault(edge.target, []).append(edge)
    invalid = sum(1 for edge in relations.references if not edge.valid)
    LOGGER.debug("Extracted %d references (%d dangling)", len(relations.references), invalid)
    return relations.references


# -- Cycle detection ---------------------------------------------------------


def detect_cycles(
    edges: list[ReferenceEdge],
    config: InspectorConfig = DEFAULT_CONFIG,
) -> list[Cycle]:
    """Find cycles made only of non-hierarchical edges.

    Nodes and their outgoing edges are visited in insertion order so the
    result is reproducible for a given document.
    """

    graph: dict[Identity, list[ReferenceEdge]] = {}
    for edge in edges:
        if edge.kind in NON_CYCLIC_KINDS or not edge.valid:
            continue
        graph.setdefault(edge.source, []).append(edge)

    cycles: list[Cycle] = []
    visited: set[Identity] = set()
    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        on_stack: set[Identity] = {root}
        path_nodes: list[Identity] = [root]
        path_edges: list[ReferenceEdge] = []
        stack: list[tuple[Identity, Iterator[ReferenceEdge]]] = [(root, iter(graph.get(root, ())))]
        while stack:
            node, outgoing = stack[-1]
            edge = next(outgoing, None)
            if edge is None:
                stack.pop()
                on_stack.discard(node)
                if len(path_nodes) > 1:
                    path_edges.pop()
                path_nodes.pop()
                continue
            target = edge.target
            if target in on_stack:
                start = path_nodes.index(target)
                cycles.append(Cycle(nodes=path_nodes[start:] + [target], edges=path_edges[start:] + [edge]))
                continue
            if target in visited:
                continue
            if len(stack) >= config.max_depth:
                raise ResourceExceeded(
                    f"Reference graph deeper than {config.max_depth}",
                    limit="max_depth",
                    value=len(stack),
                )
            visited.add(target)
            on_stack.add(target)
            path_nodes.append(target)
            path_edges.append(edge)
            stack.append((target, iter(graph.get(target, ()))))
    if cycles:
        LOGGER.debug("Detected %d circular reference chains", len(cycles))
    return cycles


# -- Hierarchy ---------------------------------------------------------------


def _exact(*keys: str):
    return lambda path: path in keys


def _contains(fragment: str):
    return lambda path: fragment in path


# (parent type, child type, path predicate on the index-free path)
_CHILD_RULES = (
    ("Catalog", "Pages", _exact("Pages")),
    ("Pages", "Page", _exact("Kids")),
    ("Page", "Font", _contains("Resources")),
    ("Page", "XObject", _contains("Resources")),
    ("StructTreeRoot", "StructElem", _exact("K")),
    ("StructElem", "StructElem", _exact("K")),
    ("Outlines", "Outlines", _exact("First", "Last")),
    ("Outlines", "Action", _exact("A")),
    ("Outlines", "Dest", _exact("Dest")),
    ("Form", "Field", _exact("Fields")),
    ("Field", "Field", _exact("Kids")),
    ("Field", "Action", _exact("A")),
    ("Page", "Annot", _exact("Annots")),
    ("Annot", "Action", _exact("A")),
    ("Annot", "Dest", _exact("Dest")),
    ("Page", "Stream", _exact("Contents")),
    ("Pages", "Stream", _exact("Contents")),
    ("Page", "ColorSpace", _contains("Resources.ColorSpace")),
    ("Page", "Pattern", _contains("Resources.Pattern")),
    ("Page", "Shading", _contains("Resources.Shading")),
    ("Page", "ExtGState", _contains("Resources.ExtGState")),
    ("OCG", "OCG", _exact("OCGs")),
    ("OCG", "Action", _exact("A")),
    ("Action", "Action", _exact("Next")),
    ("Action", "Dest", _exact("D")),
)

_GENERIC_CHILDREN = {
    "Catalog": frozenset({"Pages", "Outlines", "Metadata", "StructTreeRoot", "AcroForm"}),
    "Pages": frozenset({"Page"}),
    "Page": frozenset({"Font", "XObject", "Stream", "Annot", "ColorSpace", "Pattern", "Shading", "ExtGState"}),
    "Form": frozenset({"Field", "Font", "XObject"}),
    "Field": frozenset({"Field", "Action"}),
    "StructTreeRoot": frozenset({"StructElem"}),
    "StructElem": frozenset({"StructElem"}),
    "Outlines": frozenset({"Outlines", "Action", "Dest"}),
    "Annot": frozenset({"Action", "Dest"}),
    "OCG": frozenset({"OCG", "Action"}),
    "Action": frozenset({"Action", "Dest"}),
}


def is_child_relationship(parent_type: str, child_type: str, path: str) -> bool:
    """Return ``True`` when ``child_type`` hangs below ``parent_type`` via ``path``."""

    key = _strip_indices(path)
    for rule_parent, rule_child, matches in _CHILD_RULES:
        if rule_parent == parent_type and rule_child == child_type and matches(key):
            return True
    return child_type in _GENERIC_CHILDREN.get(parent_type, ())


def find_child_objects(document: Document, obj: PDFObject) -> list[tuple[str, PDFObject]]:
    children: list[tuple[str, PDFObject]] = []
    for path, reference in walk_references(obj.properties):
        target = document.resolve(reference)
        if target is not None and is_child_relationship(obj.type_tag, target.type_tag, path):
            children.append((path, target))
    return children


def build_hierarchy(document: Document, config: InspectorConfig = DEFAULT_CONFIG) -> HierarchyTree:
    """Depth-first walk from the Catalog recording each object once."""

    tree = HierarchyTree()
    catalogs = document.find_objects_by_type("Catalog")
    if not catalogs:
        LOGGER.debug("No Catalog object; hierarchy left empty")
        return tree
    root = catalogs[0]
    tree.root = root.identity

    visited: set[Identity] = set()
    nodes: dict[Identity, HierarchyNode] = {}
    # (object, depth, path from parent, parent identity)
    stack: list[tuple[PDFObject, int, str, Identity | None]] = [(root, 0, "", None)]
    while stack:
        obj, depth, path, parent = stack.pop()
        if obj.identity in visited:
            continue
        if depth > config.max_depth:
            raise ResourceExceeded(
                f"Object hierarchy deeper than {config.max_depth}",
                limit="max_depth",
                value=depth,
            )
        visited.add(obj.identity)
        while len(tree.levels) <= depth:
            tree.levels.append([])
        node = HierarchyNode(identity=obj.identity, type_tag=obj.type_tag, depth=depth, path=path)
        tree.levels[depth].append(node)
        nodes[obj.identity] = node
        tree.max_depth = max(tree.max_depth, depth)
        if parent is not None:
            nodes[parent].children.append(obj.identity)
        for child_path, child in reversed(find_child_objects(document, obj)):
            if child.identity not in visited:
                stack.append((child, depth + 1, child_path, obj.identity))
    LOGGER.debug("Hierarchy of %d nodes, max depth %d", len(nodes), tree.max_depth)
    return tree


# -- Logical view and statistics ---------------------------------------------


def populate_logical(document: Document) -> None:
    logical = document.logical
    by_type: dict[str, list[Identity]] = {}
    images: list[Identity] = []
    streams: list[Identity] = []
    for obj in document.unique_objects():
        by_type.setdefault(obj.type_tag, []).append(obj.identity)
        if obj.type_tag == "XObject" and obj.subtype == "Image":
            images.append(obj.identity)
        if obj.type_tag == "Stream":
            streams.append(obj.identity)
    catalogs = by_type.get("Catalog", [])
    logical.catalog = catalogs[0] if catalogs else None
    logical.pages = by_type.get("Pages", [])
    logical.page_objects = by_type.get("Page", [])
    logical.outlines = by_type.get("Outlines", [])
    logical.fonts = by_type.get("Font", [])
    logical.streams = streams
    logical.xobjects = by_type.get("XObject", [])
    logical.images = images
    logical.annotations = by_type.get("Annot", [])
    logical.actions = by_type.get("Action", [])
    logical.destinations = by_type.get("Dest", [])
    logical.metadata = by_type.get("Metadata", [])


def compute_stats(document: Document) -> None:
    stats = document.stats
    stats.total_objects = len(document.unique_objects())
    stats.type_counts = type_stats(document)

    references = document.relations.references
    valid = sum(1 for edge in references if edge.valid)
    stats.reference_counts = {
        "total": len(references),
        "valid": valid,
        "invalid": len(references) - valid,
        "circular": len(document.relations.cycles),
    }

    stats.stream_stats = stream_stats(document)


class Analyser:
    """Fill the relational, logical and statistical sections of a document."""

    def __init__(self, config: InspectorConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def run(self, document: Document) -> Document:
        extract_references(document)
        populate_logical(document)
        document.relations.cycles = detect_cycles(document.relations.references, self.config)
        document.relations.hierarchy = build_hierarchy(document, self.config)
        compute_stats(document)
        return document
