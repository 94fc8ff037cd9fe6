"""Type-specific derived fields attached to scanned objects.

Each enricher is a pure function of the object's property dictionary and is
registered against the type tag it understands.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from .schema import type_spec

__all__ = ["Enricher", "EnricherRegistry", "enrichers", "register_enricher", "enrich_properties"]

Enricher = Callable[[Mapping[str, Any]], Dict[str, Any]]


class EnricherRegistry:
    """Registry mapping type tags to enrichment functions."""

    def __init__(self) -> None:
        self._enrichers: Dict[str, Enricher] = {}

    def register(self, type_tag: str, func: Enricher) -> None:
        if type_tag in self._enrichers:
            raise ValueError(f"Enricher for '{type_tag}' is already registered")
        self._enrichers[type_tag] = func

    def get(self, type_tag: str) -> Enricher | None:
        return self._enrichers.get(type_tag)

    def names(self) -> list[str]:
        return sorted(self._enrichers)


enrichers = EnricherRegistry()


def register_enricher(type_tag: str):
    def decorator(func: Enricher) -> Enricher:
        enrichers.register(type_tag, func)
        return func

    return decorator


def enrich_properties(type_tag: str, properties: Mapping[str, Any]) -> dict[str, Any]:
    """Return the derived fields for an object of ``type_tag``."""

    spec = type_spec(type_tag)
    if spec is None:
        return {"description": "unrecognized"}
    result: dict[str, Any] = {"description": spec.description}
    func = enrichers.get(type_tag)
    if func is not None:
        result.update(func(properties))
    return result


def _number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _rect(value: Any) -> list[Any] | None:
    if isinstance(value, list) and len(value) >= 4 and all(_number(item) for item in value[:4]):
        return value[:4]
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return list(value) if isinstance(value, list) else [value]


# -- Enrichers ---------------------------------------------------------------


@register_enricher("Catalog")
def _catalog(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"has_pages_tree": "Pages" in props, "has_outlines": "Outlines" in props}


@register_enricher("Pages")
def _pages(props: Mapping[str, Any]) -> dict[str, Any]:
    kids = props.get("Kids")
    count = props.get("Count")
    return {
        "page_count": count if _number(count) else 0,
        "has_kids": isinstance(kids, list) and len(kids) > 0,
    }


@register_enricher("Page")
def _page(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {
        "has_content": "Contents" in props,
        "has_resources": "Resources" in props,
    }
    box = _rect(props.get("MediaBox"))
    if box is not None:
        extra["page_size"] = {"width": box[2] - box[0], "height": box[3] - box[1]}
    return extra


@register_enricher("Font")
def _font(props: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "font_type": props.get("Subtype", "Unknown"),
        "font_name": props.get("BaseFont", "Unknown"),
        "encoding": props.get("Encoding", "Unknown"),
    }


@register_enricher("Stream")
def _stream(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"declared_length": props.get("Length", 0)}
    if "Filter" in props:
        filters = _as_list(props["Filter"])
        extra["filters"] = filters
        extra["filter_count"] = len(filters)
    if "DecodeParms" in props:
        extra["decode_params"] = props["DecodeParms"]
    return extra


@register_enricher("XObject")
def _xobject(props: Mapping[str, Any]) -> dict[str, Any]:
    subtype = props.get("Subtype", "Unknown")
    extra: dict[str, Any] = {"xobject_type": subtype}
    if subtype == "Image":
        extra["image_info"] = {
            "width": props.get("Width"),
            "height": props.get("Height"),
            "color_space": props.get("ColorSpace"),
            "bits_per_component": props.get("BitsPerComponent"),
        }
    return extra


@register_enricher("Outlines")
def _outlines(props: Mapping[str, Any]) -> dict[str, Any]:
    count = props.get("Count")
    return {
        "outline_count": count if _number(count) else 0,
        "has_first_outline": "First" in props,
        "has_last_outline": "Last" in props,
    }


@register_enricher("Metadata")
def _metadata(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"metadata_type": props.get("Subtype", "Unknown"), "metadata_length": props.get("Length", 0)}


@register_enricher("Action")
def _action(props: Mapping[str, Any]) -> dict[str, Any]:
    action_type = props.get("S", "Unknown")
    extra: dict[str, Any] = {"action_type": action_type}
    if action_type == "URI":
        extra["target_uri"] = props.get("URI")
    return extra


@register_enricher("Annot")
def _annot(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"annotation_type": props.get("Subtype", "Unknown")}
    rect = _rect(props.get("Rect"))
    if rect is not None:
        extra["annotation_bounds"] = {"x1": rect[0], "y1": rect[1], "x2": rect[2], "y2": rect[3]}
    return extra


@register_enricher("Dest")
def _dest(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"destination": props["D"]} if "D" in props else {}


@register_enricher("PageLabel")
def _page_label(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"label_rules": props["Nums"]} if "Nums" in props else {}


@register_enricher("StructTreeRoot")
def _struct_tree_root(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {}
    if "K" in props:
        extra["structure_elements"] = props["K"]
    if "RoleMap" in props:
        extra["role_mapping"] = props["RoleMap"]
    return extra


@register_enricher("StructElem")
def _struct_elem(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"structure_type": props.get("S", "Unknown")}
    if "P" in props:
        extra["parent_structure"] = props["P"]
    return extra


@register_enricher("OCG")
def _ocg(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"layer_name": props.get("Name", "Unknown")}
    if "Usage" in props:
        extra["visibility_settings"] = props["Usage"]
    return extra


@register_enricher("ColorSpace")
def _color_space(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"color_space_type": props.get("Subtype", "Unknown")}


@register_enricher("Pattern")
def _pattern(props: Mapping[str, Any]) -> dict[str, Any]:
    return {"pattern_type": props.get("PatternType", props.get("Subtype", "Unknown"))}


@register_enricher("Shading")
def _shading(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"shading_type": props.get("ShadingType", props.get("Subtype", "Unknown"))}
    if "Coords" in props:
        extra["gradient_coords"] = props["Coords"]
    return extra


@register_enricher("ExtGState")
def _ext_g_state(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {}
    if "CA" in props:
        extra["transparency"] = props["CA"]
    if "BM" in props:
        extra["blend_mode"] = props["BM"]
    return extra


@register_enricher("XRef")
def _xref_stream(props: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {"xref_size": props.get("Size", 0), "xref_index": props.get("Index", [])}
    if "Root" in props:
        extra["root_reference"] = props["Root"]
    if "Info" in props:
        extra["info_reference"] = props["Info"]
    return extra


@register_enricher("ObjStm")
def _object_stream(props: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "object_count": props.get("N", 0),
        "first_offset": props.get("First", 0),
        "declared_length": props.get("Length", 0),
    }


@register_enricher("FontDescriptor")
def _font_descriptor(props: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "font_name": props.get("FontName", "Unknown"),
        "font_family": props.get("FontFamily", "Unknown"),
        "font_stretch": props.get("FontStretch", "Unknown"),
    }
