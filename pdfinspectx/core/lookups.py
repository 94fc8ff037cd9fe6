"""Read-only lookups and aggregations over a document's objects."""

from __future__ import annotations

from typing import Any

from .model import Document, PDFObject
from .values import to_jsonable

__all__ = [
    "page_info",
    "font_info",
    "image_info",
    "stream_info",
    "core_objects",
    "type_stats",
    "stream_stats",
    "content_stats",
    "file_info",
    "check_required_objects",
]


def _ref(obj: PDFObject | None) -> str | None:
    return str(obj.reference) if obj is not None else None


def _images(document: Document) -> list[PDFObject]:
    return [obj for obj in document.find_objects_by_type("XObject") if obj.subtype == "Image"]


def _streams(document: Document) -> list[PDFObject]:
    return [obj for obj in document.unique_objects() if obj.is_stream]


def page_info(document: Document) -> dict[str, Any]:
    pages = document.find_objects_by_type("Page")
    return {
        "total": len(pages),
        "pages": [
            {
                "ref": _ref(page),
                "media_box": to_jsonable(page.properties.get("MediaBox")),
                "crop_box": to_jsonable(page.properties.get("CropBox")),
                "rotation": page.properties.get("Rotate", 0),
                "contents": to_jsonable(page.properties.get("Contents")),
                "resources": to_jsonable(page.properties.get("Resources")),
                "page_size": page.enrichment.get("page_size"),
            }
            for page in pages
        ],
    }


def font_info(document: Document) -> list[dict[str, Any]]:
    return [
        {
            "ref": _ref(font),
            "name": to_jsonable(font.properties.get("BaseFont", font.properties.get("Name"))),
            "type": to_jsonable(font.properties.get("Subtype")),
            "encoding": to_jsonable(font.properties.get("Encoding")),
            "to_unicode": to_jsonable(font.properties.get("ToUnicode")),
        }
        for font in document.find_objects_by_type("Font")
    ]


def image_info(document: Document) -> list[dict[str, Any]]:
    return [
        {
            "ref": _ref(image),
            "width": image.properties.get("Width"),
            "height": image.properties.get("Height"),
            "bits_per_component": image.properties.get("BitsPerComponent"),
            "color_space": to_jsonable(image.properties.get("ColorSpace")),
            "filter": to_jsonable(image.properties.get("Filter")),
        }
        for image in _images(document)
    ]


def stream_info(document: Document) -> list[dict[str, Any]]:
    """Describe every object carrying a stream payload, whatever its type."""

    return [
        {
            "ref": _ref(obj),
            "type": obj.type_tag,
            "declared_length": to_jsonable(obj.properties.get("Length")),
            "actual_length": obj.stream.length if obj.stream else 0,
            "filter": to_jsonable(obj.properties.get("Filter")),
        }
        for obj in _streams(document)
    ]


def core_objects(document: Document) -> dict[str, Any]:
    """Group the structurally important objects by role."""

    catalogs = document.find_objects_by_type("Catalog")
    pages = document.find_objects_by_type("Pages")
    metadata = document.find_objects_by_type("Metadata")
    return {
        "catalog": catalogs[0] if catalogs else None,
        "pages": pages[0] if pages else None,
        "page_objects": document.find_objects_by_type("Page"),
        "fonts": document.find_objects_by_type("Font"),
        "streams": _streams(document),
        "xobjects": document.find_objects_by_type("XObject"),
        "annotations": document.find_objects_by_type("Annot"),
        "actions": document.find_objects_by_type("Action"),
        "destinations": document.find_objects_by_type("Dest"),
        "metadata": metadata[0] if metadata else None,
    }


def type_stats(document: Document) -> dict[str, int]:
    counts: dict[str, int] = {}
    for obj in document.unique_objects():
        counts[obj.type_tag] = counts.get(obj.type_tag, 0) + 1
    return counts


def stream_stats(document: Document) -> dict[str, int]:
    streams = _streams(document)
    compressed = sum(1 for obj in streams if "Filter" in obj.properties)
    return {
        "total": len(streams),
        "total_size": sum(obj.stream.length for obj in streams if obj.stream),
        "compressed": compressed,
        "uncompressed": len(streams) - compressed,
    }


def content_stats(document: Document) -> dict[str, int]:
    return {
        "pages": len(document.find_objects_by_type("Page")),
        "fonts": len(document.find_objects_by_type("Font")),
        "images": len(_images(document)),
        "streams": len(_streams(document)),
        "annotations": len(document.find_objects_by_type("Annot")),
        "actions": len(document.find_objects_by_type("Action")),
        "destinations": len(document.find_objects_by_type("Dest")),
    }


def file_info(document: Document) -> dict[str, Any]:
    physical = document.physical
    trailer = physical.trailer
    return {
        "version": physical.version,
        "file_size": physical.file_size,
        "total_objects": len(document.unique_objects()),
        "header": physical.header.to_dict(),
        "trailer": trailer.to_dict() if trailer else None,
        "startxref": trailer.startxref if trailer else None,
    }


def check_required_objects(document: Document) -> dict[str, Any]:
    catalogs = document.find_objects_by_type("Catalog")
    pages = document.find_objects_by_type("Pages")
    page_objects = document.find_objects_by_type("Page")
    return {
        "has_catalog": bool(catalogs),
        "has_pages": bool(pages),
        "has_page_objects": bool(page_objects),
        "catalog_count": len(catalogs),
        "pages_count": len(pages),
        "page_count": len(page_objects),
    }
