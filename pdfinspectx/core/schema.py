"""Static catalog of PDF object types and their property requirements.

Requirements follow ISO 32000-1.  Both tables are built once at import time
and exposed through read-only mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

__all__ = [
    "REQUIRED",
    "OPTIONAL",
    "TypeSpec",
    "SubtypeSpec",
    "TYPE_MAP",
    "SUBTYPE_MAP",
    "type_spec",
    "has_subtypes",
    "subtype_spec",
    "required_properties",
    "known_types",
]

REQUIRED = "required"
OPTIONAL = "optional"


@dataclass(slots=True, frozen=True)
class TypeSpec:
    """Requirements for one object type."""

    name: str
    description: str
    properties: Mapping[str, str]
    at_least: tuple[str, ...]

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(key for key, need in self.properties.items() if need == REQUIRED)

    @property
    def optional(self) -> tuple[str, ...]:
        return tuple(key for key, need in self.properties.items() if need == OPTIONAL)


@dataclass(slots=True, frozen=True)
class SubtypeSpec:
    """Requirements for a ``(type, subtype)`` pair."""

    type_name: str
    subtype: str
    description: str
    required: tuple[str, ...]
    optional: tuple[str, ...] = ()


def _type(name: str, description: str, required: Iterable[str], optional: Iterable[str] = ()) -> TypeSpec:
    required = tuple(required)
    properties = {key: REQUIRED for key in required}
    for key in optional:
        properties.setdefault(key, OPTIONAL)
    return TypeSpec(name, description, MappingProxyType(properties), required)


# -- Shared property lists ---------------------------------------------------


_PAGE_ATTRIBUTES = (
    "Resources", "MediaBox", "CropBox", "BleedBox", "TrimBox", "ArtBox", "BoxColorInfo",
    "Contents", "Rotate", "Group", "Thumb", "B", "Dur", "Trans", "Annots", "AA", "Metadata",
    "PieceInfo", "LastModified", "StructParents", "ID", "PZ", "SeparationInfo", "Tabs",
    "TemplateInstantiated", "PressProps", "UserUnit", "VP",
)
_FONT_OPTIONAL = ("FirstChar", "LastChar", "Widths", "FontDescriptor", "Encoding", "ToUnicode")
_CID_OPTIONAL = ("DW", "W", "DW2", "W2", "Registry", "Ordering", "Supplement", "CIDToGIDMap")
_IMAGE_OPTIONAL = (
    "Filter", "DecodeParms", "ImageMask", "Mask", "Matte", "Interpolate", "Alternates",
    "SMask", "SMaskInData", "Name", "StructParent", "ID", "OPI", "Metadata", "OC",
)
_ANNOT_OPTIONAL = ("Contents", "P", "NM", "M", "F", "AP", "AS", "Border", "C", "StructParent", "OC")
_FIELD_OPTIONAL = (
    "Kids", "T", "TU", "TM", "Ff", "V", "DV", "AA", "A", "DA", "Q", "DS", "RV",
    "AP", "AS", "Border", "C", "StructParent", "OC",
)


# -- Type catalog ------------------------------------------------------------


_TYPES = (
    _type(
        "Catalog",
        "Document root holding references to the page tree, outlines and other core entries",
        ["Pages"],
        [
            "Outlines", "Names", "Dests", "ViewerPreferences", "PageLayout", "PageMode",
            "OpenAction", "AA", "URI", "AcroForm", "Metadata", "StructTreeRoot", "MarkInfo",
            "Lang", "SpiderInfo", "OutputIntents", "PieceInfo", "OCProperties", "Perms",
            "Legal", "Requirements", "Collection", "NeedsRendering",
        ],
    ),
    _type("Pages", "Intermediate node of the page tree", ["Type", "Kids", "Count"], ("Parent",) + _PAGE_ATTRIBUTES),
    _type("Page", "Leaf node of the page tree describing one page", ["Type", "Parent"], _PAGE_ATTRIBUTES),
    _type("Font", "Font dictionary", ["Type", "Subtype", "BaseFont"], _FONT_OPTIONAL),
    _type("Stream", "Generic stream object", ["Length"], ["Filter", "DecodeParms", "F", "FFilter", "FDecodeParms", "DL"]),
    _type(
        "XObject",
        "External object such as an image or form",
        ["Type", "Subtype", "Width", "Height", "ColorSpace", "BitsPerComponent"],
        _IMAGE_OPTIONAL,
    ),
    _type("Outlines", "Document outline (bookmark) node", ["Type"], ["First", "Last", "Count"]),
    _type("Metadata", "XMP metadata stream", ["Type", "Subtype", "Length"]),
    _type(
        "Action",
        "Action dictionary",
        ["Type", "S"],
        [
            "Next", "H", "T", "F", "D", "Win", "Mac", "Unix", "URI", "IsMap", "SubmitForm",
            "ResetForm", "ImportData", "JavaScript", "SetOCGState", "Rendition", "Trans",
            "GoTo3DView",
        ],
    ),
    _type("Annot", "Annotation dictionary", ["Type", "Subtype", "Rect"], _ANNOT_OPTIONAL),
    _type("Dest", "Named destination", ["D"]),
    _type("PageLabel", "Page label dictionary", ["Type", "Nums"]),
    _type(
        "StructTreeRoot",
        "Root of the logical structure tree",
        ["Type"],
        ["K", "RoleMap", "ClassMap", "ParentTree", "ParentTreeNextKey", "IDTree", "IDTreeNextKey"],
    ),
    _type(
        "StructElem",
        "Structure element",
        ["Type", "S"],
        [
            "P", "K", "A", "C", "R", "T", "Lang", "Alt", "E", "ActualText", "Code", "ID",
            "PG", "BBox", "Attr",
        ],
    ),
    _type("OCG", "Optional content group", ["Type", "Name"], ["Intent", "Usage", "F", "VE", "AS", "OCGs"]),
    _type("ColorSpace", "Colour space", ["Type"]),
    _type("Pattern", "Pattern dictionary", ["Type", "PatternType"]),
    _type("Shading", "Shading dictionary", ["Type", "ShadingType", "ColorSpace"], ["Background", "BBox", "AntiAlias"]),
    _type(
        "ExtGState",
        "Graphics state parameter dictionary",
        ["Type"],
        [
            "LW", "LC", "LJ", "ML", "D", "RI", "OP", "op", "OPM", "Font", "BG", "BG2",
            "UCR", "UCR2", "TR", "TR2", "HT", "FL", "SM", "SA", "BM", "SMask", "CA", "ca",
            "AIS", "TK",
        ],
    ),
    _type(
        "XRef",
        "Cross-reference stream",
        ["Type", "Size"],
        ["Index", "W", "Root", "Info", "ID", "Encrypt", "Filter", "DecodeParms", "Length"],
    ),
    _type("ObjStm", "Object stream", ["Type", "N", "First", "Length"], ["Filter", "DecodeParms"]),
    _type(
        "FontDescriptor",
        "Font descriptor",
        ["Type", "FontName", "Flags", "FontBBox", "ItalicAngle"],
        [
            "FontFamily", "FontStretch", "FontWeight", "Ascent", "Descent", "Leading",
            "CapHeight", "XHeight", "StemV", "StemH", "AvgWidth", "MaxWidth", "MissingWidth",
            "CharSet", "FontFile", "FontFile2", "FontFile3",
        ],
    ),
    _type("Encoding", "Character encoding dictionary", ["Type"], ["BaseEncoding", "Differences"]),
    _type("CMap", "Character map", ["Type"], ["WMode", "UseCMap"]),
    _type("Function", "Function dictionary", ["FunctionType", "Domain"], ["Range"]),
    _type("Halftone", "Halftone dictionary", ["Type", "HalftoneType"]),
    _type("Mask", "Soft mask dictionary", ["Type"]),
    _type("Group", "Group attributes dictionary", ["Type", "S"], ["CS", "I", "K"]),
    _type("Transparency", "Transparency group", ["Type"]),
    _type(
        "Sig",
        "Digital signature dictionary",
        ["Type", "Filter", "Contents", "ByteRange"],
        [
            "SubFilter", "Name", "Reason", "Location", "ContactInfo", "M", "Prop_Build",
            "Prop_AuthTime", "Prop_AuthType", "Reference",
        ],
    ),
    _type(
        "Filespec",
        "File specification",
        ["Type", "F"],
        ["EF", "UF", "Desc", "CI", "AF", "RF", "FEmbeddedFile", "FRelation", "FS", "V", "DV", "AA"],
    ),
    _type("EmbeddedFile", "Embedded file stream", ["Type"], ["Subtype", "Params"]),
    _type("Collection", "Portable collection", ["Type"], ["Schema", "D", "View", "Sort"]),
    _type("Sound", "Sound object", ["Type", "S", "R", "C", "B", "E", "CO", "CP"]),
    _type("Movie", "Movie dictionary", ["Type", "F"], ["Aspect", "Rotate", "Poster"]),
    _type(
        "3D",
        "3D artwork stream",
        ["Type", "Subtype"],
        ["DefaultView", "Views", "Resources", "OnInstantiate", "Extensions"],
    ),
    _type("RichMedia", "Rich media content", ["Type", "Subtype", "Assets", "Config", "Views"], ["Activation"]),
    _type("Widget", "Interactive form widget", ["Type", "Subtype", "Rect", "FT", "Parent"], _FIELD_OPTIONAL),
    _type("TrapNet", "Trap network annotation", ["Type", "LastModified", "Version", "Annots"]),
)

TYPE_MAP: Mapping[str, TypeSpec] = MappingProxyType({spec.name: spec for spec in _TYPES})


# -- Subtype catalog ---------------------------------------------------------


def _subtypes(type_name: str, entries: Mapping[str, tuple[tuple[str, ...], tuple[str, ...]]]):
    return MappingProxyType(
        {
            subtype: SubtypeSpec(type_name, subtype, f"{subtype} {type_name}", required, optional)
            for subtype, (required, optional) in entries.items()
        }
    )


_SIMPLE_FONT = (("Type", "Subtype", "BaseFont"), _FONT_OPTIONAL)
_CID_FONT = (("Type", "Subtype", "BaseFont", "CIDSystemInfo", "FontDescriptor"), _CID_OPTIONAL)
_ANNOT_BASE = (("Type", "Subtype", "Rect"), _ANNOT_OPTIONAL)
_WIDGET_FIELD = (("Type", "Subtype", "Rect", "FT", "Parent"), _FIELD_OPTIONAL)
_RICH_MEDIA = (("Type", "Subtype", "Assets", "Config", "Views"), ("Activation",))
_THREE_D = (("Type", "Subtype", "VA"), ("DefaultView", "Views", "Resources", "OnInstantiate", "Extensions"))


def _annot_with(extra: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    return (_ANNOT_BASE[0] + (extra,), _ANNOT_OPTIONAL)


SUBTYPE_MAP: Mapping[str, Mapping[str, SubtypeSpec]] = MappingProxyType(
    {
        "Font": _subtypes(
            "Font",
            {
                "Type1": _SIMPLE_FONT,
                "TrueType": _SIMPLE_FONT,
                "MMType1": _SIMPLE_FONT,
                "Type3": (
                    ("Type", "Subtype", "FontBBox", "FontMatrix", "CharProcs", "Encoding"),
                    ("FirstChar", "LastChar", "Widths", "FontDescriptor", "ToUnicode"),
                ),
                "Type0": (
                    ("Type", "Subtype", "BaseFont", "DescendantFonts", "Encoding"),
                    ("FirstChar", "LastChar", "Widths", "FontDescriptor", "ToUnicode"),
                ),
                "CIDFontType0": _CID_FONT,
                "CIDFontType2": _CID_FONT,
            },
        ),
        "XObject": _subtypes(
            "XObject",
            {
                "Image": (("Type", "Subtype", "Width", "Height", "ColorSpace", "BitsPerComponent"), _IMAGE_OPTIONAL),
                "Form": (
                    ("Type", "Subtype", "BBox"),
                    (
                        "Matrix", "Group", "Ref", "Metadata", "PieceInfo", "LastModified",
                        "StructParent", "StructParents", "OPI", "OC", "Name", "Resources",
                    ),
                ),
                "PS": (("Type", "Subtype", "Length"), ("Filter", "DecodeParms")),
            },
        ),
        "Metadata": _subtypes("Metadata", {"XML": (("Type", "Subtype", "Length"), ("Filter", "DecodeParms"))}),
        "3D": _subtypes("3D", {"U3D": _THREE_D, "PRC": _THREE_D}),
        "RichMedia": _subtypes("RichMedia", {"Flash": _RICH_MEDIA, "Video": _RICH_MEDIA, "Sound": _RICH_MEDIA}),
        "Widget": _subtypes(
            "Widget",
            {"Button": _WIDGET_FIELD, "Text": _WIDGET_FIELD, "Choice": _WIDGET_FIELD, "Signature": _WIDGET_FIELD},
        ),
        "Annot": _subtypes(
            "Annot",
            {
                **{
                    name: _ANNOT_BASE
                    for name in (
                        "Text", "Link", "FreeText", "Square", "Circle", "Highlight", "Underline",
                        "Squiggly", "StrikeOut", "Stamp", "Caret", "Popup", "Screen", "Widget",
                        "PrinterMark", "TrapNet", "Watermark",
                    )
                },
                "Line": _annot_with("L"),
                "Polygon": _annot_with("Vertices"),
                "PolyLine": _annot_with("Vertices"),
                "Ink": _annot_with("InkList"),
                "FileAttachment": _annot_with("FS"),
                "Sound": _annot_with("Sound"),
                "Movie": _annot_with("T"),
                "3D": _annot_with("3DD"),
                "Redact": _annot_with("QuadPoints"),
            },
        ),
    }
)


# -- Lookups -----------------------------------------------------------------


def type_spec(type_name: str | None) -> TypeSpec | None:
    if not type_name:
        return None
    return TYPE_MAP.get(str(type_name))


def has_subtypes(type_name: str | None) -> bool:
    return bool(type_name) and str(type_name) in SUBTYPE_MAP


def subtype_spec(type_name: str | None, subtype: str | None) -> SubtypeSpec | None:
    if not type_name or not subtype:
        return None
    table = SUBTYPE_MAP.get(str(type_name))
    if table is None:
        return None
    return table.get(str(subtype))


def required_properties(type_name: str | None, subtype: str | None = None) -> tuple[str, ...]:
    """Return the required property names for a type, honouring subtypes."""

    specific = subtype_spec(type_name, subtype)
    if specific is not None:
        return specific.required
    spec = type_spec(type_name)
    return spec.at_least if spec is not None else ()


def known_types() -> tuple[str, ...]:
    return tuple(TYPE_MAP.keys())
