"""Serialisable views of an analysed document."""

from __future__ import annotations

import json
from typing import Any

from .lookups import (
    content_stats,
    core_objects,
    file_info,
    font_info,
    image_info,
    page_info,
    stream_info,
    type_stats,
)
from .model import Document, PDFObject

__all__ = ["summary", "export_document", "detailed_report", "to_json", "text_report"]


def _refs(value: Any) -> Any:
    if isinstance(value, PDFObject):
        return str(value.reference)
    if isinstance(value, list):
        return [_refs(item) for item in value]
    return value


def summary(document: Document) -> dict[str, Any]:
    info = file_info(document)
    content = content_stats(document)
    return {
        "version": info["version"],
        "file_size": info["file_size"],
        "total_objects": info["total_objects"],
        "pages": content["pages"],
        "fonts": content["fonts"],
        "images": content["images"],
        "streams": content["streams"],
        "references": document.stats.reference_counts["total"],
        "invalid_references": document.stats.reference_counts["invalid"],
        "circular_refs": document.stats.reference_counts["circular"],
        "max_depth": document.relations.hierarchy.max_depth,
        "is_valid": document.validation.is_valid,
        "errors": len(document.validation.errors),
        "warnings": len(document.validation.warnings),
    }


def export_document(document: Document) -> dict[str, Any]:
    """Full structural snapshot, JSON compatible."""

    snapshot = document.to_dict()
    snapshot["summary"] = summary(document)
    snapshot["content"] = {
        "pages": page_info(document),
        "fonts": font_info(document),
        "images": image_info(document),
        "streams": stream_info(document),
    }
    snapshot["core_objects"] = {key: _refs(value) for key, value in core_objects(document).items()}
    return snapshot


def detailed_report(document: Document) -> dict[str, Any]:
    info = file_info(document)
    validation = document.validation
    return {
        "file_info": {
            "version": info["version"],
            "file_size": info["file_size"],
            "total_objects": info["total_objects"],
        },
        "structure": {
            "hierarchy": document.relations.hierarchy.to_dict(),
            "references": dict(document.stats.reference_counts),
        },
        "content": {
            "pages": page_info(document),
            "fonts": font_info(document),
            "images": image_info(document),
            "streams": content_stats(document)["streams"],
        },
        "validation": {
            "is_valid": validation.is_valid,
            "sections": dict(validation.sections),
            "errors": [item.to_dict() for item in validation.errors],
            "warnings": [item.to_dict() for item in validation.warnings],
            "object_validation": validation.object_report or None,
        },
        "analysis": {
            "object_types": type_stats(document),
            "circular_references": [cycle.to_dict() for cycle in document.relations.cycles],
        },
    }


def to_json(document: Document, indent: int | None = 2) -> str:
    return json.dumps(export_document(document), indent=indent, ensure_ascii=False)


def text_report(document: Document) -> str:
    data = summary(document)
    lines = [
        "=== PDF Analysis Report ===",
        "",
        "File:",
        f"  Version: {data['version']}",
        f"  Objects: {data['total_objects']}",
        f"  Pages: {data['pages']}",
        f"  Fonts: {data['fonts']}",
        f"  Images: {data['images']}",
        f"  Streams: {data['streams']}",
        "",
        "References:",
        f"  Total: {data['references']}",
        f"  Circular: {data['circular_refs']}",
        f"  Max depth: {data['max_depth']}",
        "",
        "Validation:",
        f"  Valid: {'yes' if data['is_valid'] else 'no'}",
        f"  Errors: {data['errors']}",
        f"  Warnings: {data['warnings']}",
    ]
    report = document.validation.object_report
    if report:
        lines += [
            "",
            "Objects:",
            f"  Checked: {report.get('total', 0)}",
            f"  Valid: {report.get('valid', 0)}",
            f"  Invalid: {report.get('invalid', 0)}",
            f"  Unknown types: {report.get('unknown_types', 0)}",
        ]
        for type_tag, counts in sorted(report.get("type_stats", {}).items()):
            lines.append(f"  {type_tag}: {counts['total']} (valid {counts['valid']}, invalid {counts['invalid']})")
    for title, items in (("Errors", document.validation.errors), ("Warnings", document.validation.warnings)):
        if items:
            lines += ["", f"{title}:"]
            lines += [f"  - [{item.code}] {item.msg}" for item in items]
    return "\n".join(lines) + "\n"
