from __future__ import annotations

import pytest

from pdfinspectx.api import analyse, inspect_pdf, parse
from pdfinspectx.config import InspectorConfig
from pdfinspectx.core.model import Document, PDFObject, Trailer, XRefEntry, XRefState
from pdfinspectx.core.validator import (
    check_encryption,
    check_stream_lengths,
    cross_check_xref,
    interpret_startxref,
    validate_free_entry_chain,
    validate_header,
    validate_object,
    validate_pages,
    validate_trailer,
)
from pdfinspectx.core.values import HexString, Name, Reference


def _free(number: int, next_free: int, generation: int = 0) -> XRefEntry:
    return XRefEntry(number, generation, XRefState.FREE, next_free_object=next_free)


def _used(number: int, offset: int = 100) -> XRefEntry:
    return XRefEntry(number, 0, XRefState.IN_USE, offset=offset)


def _codes(diagnostics) -> list[str]:
    return [item.code for item in diagnostics]


def _object(number: int, type_tag: str = "Unknown", **properties) -> PDFObject:
    return PDFObject(number, 0, offset=0, raw_content="", type_tag=type_tag, properties=properties)


# -- Free entry list ---------------------------------------------------------


def test_free_chain_returning_to_zero_is_clean():
    entries = [_free(0, 3, 65535), _used(1), _used(2), _free(3, 0, 1)]
    assert validate_free_entry_chain(entries) == []


def test_free_chain_with_only_the_head_is_clean():
    assert validate_free_entry_chain([_free(0, 0, 65535)]) == []


def test_free_chain_pointing_at_missing_entry():
    entries = [_free(0, 5, 65535), _used(1), _free(5, 99)]
    assert "FREE_ENTRY_OBJECT_MISSING" in _codes(validate_free_entry_chain(entries))

    short = [_free(0, 5, 65535), _free(5, 99)]
    assert _codes(validate_free_entry_chain(short)) == ["FREE_ENTRY_OBJECT_MISSING"]


def test_free_chain_head_problems():
    assert _codes(validate_free_entry_chain([_used(1)])) == ["FREE_ENTRY_OBJECT0_MISSING"]
    codes = _codes(validate_free_entry_chain([_used(0)]))
    assert "FREE_ENTRY_OBJECT0_IN_USE" in codes
    assert "FREE_ENTRY_OBJECT0_GENERATION" in codes


def test_free_chain_loops_and_in_use_links():
    looping = [_free(0, 2, 65535), _free(2, 3), _free(3, 2)]
    assert "FREE_ENTRY_CIRCULAR_CHAIN" in _codes(validate_free_entry_chain(looping))

    in_use = [_free(0, 1, 65535), _used(1)]
    assert _codes(validate_free_entry_chain(in_use)) == ["FREE_ENTRY_OBJECT_IN_USE"]


def test_free_entries_outside_the_chain():
    entries = [_free(0, 0, 65535), _used(1), _free(2, 1, 0), _free(3, 0, 65535)]
    diagnostics = validate_free_entry_chain(entries)
    assert _codes(diagnostics) == ["FREE_ENTRY_NOT_IN_CHAIN"]
    assert "Object 2" in diagnostics[0].msg


# -- Trailer -----------------------------------------------------------------


def _numbered_document(count: int, size) -> Document:
    document = Document()
    for number in range(count):
        document.add_object(_object(number))
    document.physical.trailer = Trailer(
        properties={"Size": size, "Root": Reference(1, 0)},
        startxref_raw=None,
        has_eof=True,
        is_valid=True,
    )
    return document


def test_trailer_size_must_follow_highest_object_number():
    result = validate_trailer(_numbered_document(10, 11))
    sizes = [item for item in result.errors if item.code == "TRAILER_SIZE_INCORRECT"]
    assert len(sizes) == 1
    assert "expected 10" in sizes[0].msg

    result = validate_trailer(_numbered_document(10, 10))
    assert "TRAILER_SIZE_INCORRECT" not in _codes(result.errors)


def test_trailer_size_type_and_required_keys():
    result = validate_trailer(_numbered_document(3, Name("Ten")))
    assert "TRAILER_SIZE_TYPE_INVALID" in _codes(result.errors)

    document = _numbered_document(3, 3)
    document.physical.trailer.properties = {}
    codes = _codes(validate_trailer(document).errors)
    assert codes.count("TRAILER_MISSING_REQUIRED_PROP") == 2
    assert "TRAILER_STARTXREF_MISSING" in codes


def test_trailer_missing_entirely():
    assert _codes(validate_trailer(Document()).errors) == ["TRAILER_MISSING"]


def test_trailer_id_and_encrypt_checks():
    document = _numbered_document(3, 3)
    document.physical.trailer.properties["ID"] = [HexString("<>")]
    assert "TRAILER_ID_TYPE_INVALID" in _codes(validate_trailer(document).errors)

    document.physical.trailer.properties["ID"] = [HexString("<>"), HexString("<AB>")]
    assert "TRAILER_ID_FORMAT_INVALID" in _codes(validate_trailer(document).errors)

    del document.physical.trailer.properties["ID"]
    document.physical.trailer.properties["Encrypt"] = Reference(40)
    codes = _codes(validate_trailer(document).errors)
    assert "TRAILER_ENCRYPT_REF_INVALID" in codes
    assert "TRAILER_ENCRYPT_NO_ID" in codes


def test_trailer_eof_is_a_warning(pdf_builder):
    data = pdf_builder(["<< /Type /Catalog /Pages 2 0 R >>"]).replace(b"%%EOF", b"")
    result = validate_trailer(parse(data))
    assert "TRAILER_EOF_MISSING" in _codes(result.warnings)
    assert "TRAILER_EOF_MISSING" not in _codes(result.errors)


def test_startxref_must_point_at_xref(pdf_builder):
    objects = ["<< /Type /Catalog /Pages 2 0 R >>", "<< /Type /Pages /Kids [] /Count 0 >>"]
    result = validate_trailer(parse(pdf_builder(objects, startxref=20)))
    assert "TRAILER_STARTXREF_MISMATCH" in _codes(result.errors)

    result = validate_trailer(parse(pdf_builder(objects)))
    assert result.errors == []


@pytest.mark.parametrize(
    "raw,size,allow_hex,expected,code",
    [
        ("100", 1000, True, 100, None),
        ("3E8", 2000, True, 1000, None),
        ("3E8", 2000, False, None, "TRAILER_STARTXREF_FORMAT_INVALID"),
        ("5000", 1000, True, None, "TRAILER_STARTXREF_OUT_OF_RANGE"),
        ("-5", 1000, True, None, "TRAILER_STARTXREF_NEGATIVE"),
        ("xyz", 1000, True, None, "TRAILER_STARTXREF_FORMAT_INVALID"),
    ],
)
def test_interpret_startxref(raw, size, allow_hex, expected, code):
    value, problem = interpret_startxref(raw, size, allow_hex)
    assert value == expected
    assert (problem.code if problem else None) == code


# -- Header ------------------------------------------------------------------


def test_header_checks(minimal_pdf_bytes):
    assert _codes(validate_header(None).errors) == ["HEADER_MISSING"]

    damaged = parse(minimal_pdf_bytes.replace(b"%PDF-1.4", b"%XYZ-1.4", 1))
    codes = _codes(validate_header(damaged.header).errors)
    assert codes == ["HEADER_VERSION_INVALID", "HEADER_PDF_MISSING"]

    assert validate_header(parse(minimal_pdf_bytes).header).is_valid


# -- Objects -----------------------------------------------------------------


def test_subtype_requirements_are_enforced():
    font = _object(
        5,
        "Font",
        Type=Name("Font"),
        Subtype=Name("Type0"),
        BaseFont=Name("Arial"),
        Encoding=Name("Identity-H"),
    )
    check = validate_object(font)
    assert check.missing_required == ["DescendantFonts"]
    assert _codes(check.errors) == ["OBJECT_MISSING_REQUIRED_PROPS"]
    assert check.is_valid is False
    assert check.subtype_description == "Type0 Font"


def test_unknown_subtype_is_reported():
    font = _object(6, "Font", Type=Name("Font"), Subtype=Name("Weird"), BaseFont=Name("X"))
    check = validate_object(font)
    assert check.unknown_subtype is True
    assert _codes(check.errors) == ["OBJECT_UNKNOWN_SUBTYPE"]
    assert check.missing_required == []


def test_unknown_types_only_check_property_names():
    check = validate_object(_object(7, Foo=1))
    assert check.unknown_type is True
    assert check.errors == [] and check.warnings == []
    assert check.is_valid

    assert validate_object(_object(8, "Info", Title="x")).unknown_type is False

    odd = PDFObject(9, 0, offset=0, raw_content="", properties={"": 1})
    check = validate_object(odd)
    assert _codes(check.warnings) == ["OBJECT_INVALID_PROPERTY_NAME"]
    assert check.is_valid is False


def test_stream_length_mismatch_is_a_warning(pdf_builder):
    document = parse(pdf_builder(["<< /Type /Catalog >>", "<< /Length 10 >>\nstream\nhello\nendstream"]))
    assert _codes(check_stream_lengths(document)) == ["STREAM_LENGTH_MISMATCH"]


def test_indirect_stream_length_is_resolved(pdf_builder):
    document = parse(
        pdf_builder(["<< /Type /Catalog >>", "<< /Length 3 0 R >>\nstream\nhello\nendstream", "5"])
    )
    assert check_stream_lengths(document) == []


# -- Cross-reference cross-check ---------------------------------------------


def test_cross_check_of_clean_file(minimal_pdf_bytes):
    check = cross_check_xref(parse(minimal_pdf_bytes))
    assert check.total_entries == 4
    assert check.valid_entries == 4
    assert check.errors == [] and check.warnings == []


def test_cross_check_offset_and_generation_drift(minimal_pdf_bytes):
    document = parse(minimal_pdf_bytes)
    document.xref.entry_for(2).offset += 5000
    document.xref.entry_for(3).generation = 1
    document.xref.entries.append(XRefEntry(7, 0, XRefState.IN_USE, offset=10))

    check = cross_check_xref(document)
    assert _codes(check.errors) == [
        "XREF_MISSING_OBJECTS",
        "XREF_OFFSET_MISMATCHES",
        "XREF_GENERATION_MISMATCHES",
    ]
    assert check.missing_objects == [7]
    assert check.offset_mismatches[0]["object_number"] == 2
    assert check.generation_mismatches[0]["actual_generation"] == 0


def test_cross_check_offset_tolerance(minimal_pdf_bytes):
    document = parse(minimal_pdf_bytes)
    document.xref.entry_for(2).offset += 3
    assert cross_check_xref(document).offset_mismatches == []
    strict = cross_check_xref(document, InspectorConfig(offset_tolerance=0))
    assert [item["difference"] for item in strict.offset_mismatches] == [3]


def test_cross_check_free_and_unlisted_objects(minimal_pdf_bytes):
    update = b"4 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n"
    document = parse(minimal_pdf_bytes + update)
    document.xref.entry_for(3).state = XRefState.FREE

    check = cross_check_xref(document)
    assert check.missing_in_xref == [4]
    assert check.free_but_present == [3]
    assert _codes(check.warnings) == ["XREF_MISSING_IN_XREF", "XREF_FREE_OBJECT_PRESENT"]
    assert check.errors == []


# -- Whole document ----------------------------------------------------------


def test_minimal_document_is_valid(minimal_pdf_bytes):
    document = inspect_pdf(minimal_pdf_bytes)
    validation = document.validation

    assert validation.is_valid
    assert validation.errors == []
    assert validation.sections == {"header": True, "body": True, "xref": True, "trailer": True}
    assert "NO_FONT_OBJECTS" in validation.codes()
    assert document.relations.hierarchy.max_depth == 2
    assert validation.object_report["total"] == 3
    assert validation.object_report["valid"] == 3
    assert validation.object_report["xref"]["valid_entries"] == 4


def test_pypdf_output_is_valid(sample_pdf):
    validation = inspect_pdf(sample_pdf).validation
    assert validation.errors == []
    assert validation.is_valid


def test_broken_trailer_invalidates_document(broken_pdf):
    validation = inspect_pdf(broken_pdf).validation
    assert validation.is_valid is False
    assert validation.sections["trailer"] is False
    codes = validation.codes()
    assert {"TRAILER_ROOT_REF_INVALID", "TRAILER_SIZE_INCORRECT", "STRUCTURE_VALIDATION_FAILED"} <= codes


def test_duplicate_object_numbers_are_errors(minimal_pdf_bytes):
    update = b"3 0 obj\n<< /Type /Page /Parent 2 0 R >>\nendobj\n"
    validation = inspect_pdf(minimal_pdf_bytes + update).validation
    assert "BODY_DUPLICATE_OBJECT_NUMBERS" in [item.code for item in validation.errors]
    assert validation.sections["body"] is False


def test_missing_catalog_and_unterminated_objects(pdf_builder):
    data = pdf_builder(["<< /Type /Pages /Kids [] /Count 0 >>"])
    data = data.replace(b"\nendobj", b"", 1)
    validation = inspect_pdf(data).validation
    assert "MISSING_CATALOG" in _codes(validation.errors)
    assert "NO_PAGE_OBJECTS" in _codes(validation.warnings)
    assert "OBJECT_MISSING_ENDOBJ" in _codes(validation.warnings)


def test_circular_references_are_warnings(pdf_builder):
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 4 0 R >>",
            "<< /Link 3 0 R >>",
            "<< /Link 2 0 R >>",
            "<< /Type /Pages /Kids [] /Count 0 >>",
        ]
    )
    validation = inspect_pdf(data).validation
    assert "CIRCULAR_REFERENCES" in _codes(validation.warnings)
    assert "UNKNOWN_OBJECT_TYPES" in _codes(validation.warnings)


def test_page_advisories(pdf_builder):
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R 4 0 R] /Count 2 /Resources << >> >>",
            "<< /Type /Page /Parent 2 0 R /Rotate 45 >>",
            "<< /Type /Page /Parent 2 0 R /Rotate 90 /Contents 5 0 R >>",
            "<< /Length 0 >>\nstream\n\nendstream",
        ]
    )
    warnings = validate_pages(parse(data))
    assert _codes(warnings) == ["PAGE_ROTATION_NONSTANDARD", "PAGE_CONTENTS_MISSING"]
    assert "Page 3 0" in warnings[0].msg


def test_pages_without_resources_anywhere(minimal_pdf_bytes):
    validation = inspect_pdf(minimal_pdf_bytes).validation
    assert {"PAGE_RESOURCES_MISSING", "PAGE_CONTENTS_MISSING"} <= set(_codes(validation.warnings))
    assert validation.is_valid


def test_inherited_rotation_is_checked(pdf_builder):
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R] /Count 1 /Rotate (sideways) >>",
            "<< /Type /Page /Parent 2 0 R /Resources << >> /Contents 4 0 R >>",
            "<< /Length 0 >>\nstream\n\nendstream",
        ]
    )
    assert _codes(validate_pages(parse(data))) == ["PAGE_ROTATION_INVALID"]


def test_encryption_advisories(pdf_builder):
    encrypted = pdf_builder(
        ["<< /Type /Catalog /Pages 2 0 R >>", "<< /Filter /Standard /V 2 /R 3 >>"],
        trailer="/Size 3 /Root 1 0 R /Encrypt 2 0 R /ID [<AB> <CD>]",
    )
    assert _codes(check_encryption(parse(encrypted))) == ["DOCUMENT_ENCRYPTED"]

    form = pdf_builder(["<< /Type /Catalog /Pages 2 0 R /AcroForm << /Fields [] >> >>"])
    diagnostics = check_encryption(parse(form))
    assert _codes(diagnostics) == ["UNENCRYPTED_SENSITIVE_CONTENT"]
    assert "AcroForm" in diagnostics[0].detail

    validation = inspect_pdf(pdf_builder(["<< /Type /Catalog /Pages 2 0 R >>"])).validation
    assert "UNENCRYPTED_SENSITIVE_CONTENT" not in validation.codes()
    assert "DOCUMENT_ENCRYPTED" not in validation.codes()


def test_revalidation_replaces_previous_results(minimal_pdf_bytes):
    document = inspect_pdf(minimal_pdf_bytes)
    before = list(document.validation.warnings)
    analyse(document)
    assert document.validation.warnings == before
