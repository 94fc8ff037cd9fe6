from __future__ import annotations

import pytest

from pdfinspectx.api import inspect_pdf
from pdfinspectx.config import InspectorConfig
from pdfinspectx.core.model import XRefState
from pdfinspectx.core.parser import (
    PDFParser,
    ScanCursor,
    iter_objects,
    parse_header,
    parse_next_object,
    parse_trailer,
    parse_xref_table,
)
from pdfinspectx.core.values import Reference
from pdfinspectx.exceptions import EmptyInputError, ResourceExceeded


def test_pdf_parser_builds_physical_document(minimal_pdf_bytes):
    document = PDFParser(minimal_pdf_bytes).parse()

    assert document.version == "1.4"
    assert document.header.is_valid
    assert document.physical.file_size == len(minimal_pdf_bytes)
    assert [obj.type_tag for obj in document.objects] == ["Catalog", "Pages", "Page"]

    page = document.get_object(3)
    assert page.properties["Parent"] == Reference(2, 0)
    assert page.enrichment["page_size"] == {"width": 612, "height": 792}
    assert page.offset == minimal_pdf_bytes.index(b"3 0 obj")
    assert page.raw_content.startswith("3 0 obj")
    assert page.raw_content.endswith("endobj")


def test_pdf_parser_reads_files(minimal_pdf):
    parser = PDFParser(minimal_pdf)
    document = parser.parse()
    assert parser.source_path == minimal_pdf.resolve()
    assert len(document.objects) == 3


def test_parse_header_variants():
    header = parse_header(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj")
    assert header.version == "1.7"
    assert header.raw_content == "%PDF-1.7"

    shifted = parse_header(b"junk\n%PDF-2.0\n")
    assert shifted.version == "2.0"
    assert shifted.raw_content == "%PDF-2.0"

    missing = parse_header(b"1 0 obj\n<< >>\nendobj\n")
    assert missing.version is None
    assert missing.is_valid is False
    assert missing.raw_content == "1 0 obj"


def test_xref_table_and_trailer(minimal_pdf_bytes):
    xref_at = minimal_pdf_bytes.index(b"\nxref\n") + 1
    xref = parse_xref_table(minimal_pdf_bytes, xref_at)

    assert xref.is_valid
    assert xref.start_position == xref_at
    assert xref.subsections == [(0, 4)]
    assert len(xref.entries) == 4
    head = xref.entries[0]
    assert head.state is XRefState.FREE
    assert head.generation == 65535
    assert head.next_free_object == 0
    assert xref.entry_for(2).offset == minimal_pdf_bytes.index(b"2 0 obj")

    trailer = parse_trailer(minimal_pdf_bytes)
    assert trailer.is_valid
    assert trailer.properties["Root"] == Reference(1, 0)
    assert trailer.properties["Size"] == 4
    assert trailer.startxref == xref_at
    assert trailer.has_eof


def test_xref_subsections_number_entries(pdf_builder):
    data = pdf_builder(["<< /Type /Catalog /Pages 2 0 R >>"]).replace(
        b"xref\n0 2\n",
        b"xref\n0 1\n",
    )
    data = data.replace(b"0000000000 65535 f \n", b"0000000000 65535 f \n1 1\n", 1)
    xref = parse_xref_table(data)
    assert xref.subsections == [(0, 1), (1, 1)]
    assert [entry.object_number for entry in xref.entries] == [0, 1]


def test_malformed_xref_lines_are_collected(pdf_builder):
    data = pdf_builder(["<< /Type /Catalog /Pages 2 0 R >>"]).replace(b"00000 n", b"0000x n")
    xref = parse_xref_table(data)
    assert xref.is_valid is False
    assert len(xref.malformed_lines) == 1


def test_streams_are_captured(pdf_builder):
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Length 5 >>\nstream\nhello\nendstream",
        ]
    )
    document = PDFParser(data).parse()
    stream = document.get_object(2)
    assert stream.type_tag == "Stream"
    assert stream.stream.data == b"hello"
    assert stream.stream.length == 5
    assert stream.properties["Length"] == 5
    assert stream.enrichment["declared_length"] == 5


def test_scalar_objects_keep_their_value(pdf_builder):
    document = PDFParser(pdf_builder(["<< /Type /Catalog >>", "42", "[1 2 0 R]"])).parse()
    assert document.get_object(2).value == 42
    assert document.get_object(3).value == [1, Reference(2, 0)]
    assert document.get_object(2).properties == {}


def test_small_window_grows_over_large_objects(pdf_builder):
    payload = "x" * 5000
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 2 0 R >>",
            f"<< /Length {len(payload)} >>\nstream\n{payload}\nendstream",
            "<< /Type /Pages /Kids [] /Count 0 >>",
        ]
    )
    cursor = ScanCursor()
    config = InspectorConfig(window_step=100)
    objects = []
    while cursor.position < len(data):
        obj = parse_next_object(data, cursor, config)
        if obj is not None:
            objects.append(obj)
    assert [obj.object_number for obj in objects] == [1, 2, 3]
    assert objects[1].stream.length == 5000
    assert cursor.windows_grown > 0
    assert cursor.objects_seen == 3


def test_missing_endobj_is_recovered():
    data = (
        b"%PDF-1.4\n"
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\n"
        b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
    )
    objects = list(iter_objects(data))
    assert [obj.object_number for obj in objects] == [1, 2]
    assert objects[0].has_endobj is False
    assert objects[0].type_tag == "Catalog"
    assert objects[1].has_endobj is True


def test_object_markers_inside_strings_do_not_split_objects(pdf_builder):
    data = pdf_builder(
        [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Note (see 9 0 obj here) >>",
        ]
    )
    objects = list(iter_objects(data))
    assert [(obj.object_number, obj.has_endobj) for obj in objects] == [(1, True), (2, True), (3, True)]
    assert objects[2].properties["Note"] == "see 9 0 obj here"

    validation = inspect_pdf(data).validation
    assert validation.errors == []
    assert "OBJECT_MISSING_ENDOBJ" not in validation.codes()
    assert "XREF_MISSING_IN_XREF" not in validation.codes()


def test_stream_without_eol_before_endstream(pdf_builder):
    data = pdf_builder(["<< /Type /Catalog /Pages 2 0 R >>", "<< /Length 3 >>stream\nabcendstream"])
    stream = PDFParser(data).parse().get_object(2)
    assert stream.type_tag == "Stream"
    assert stream.stream is not None
    assert stream.stream.data == b"abc"


def test_compact_document_without_whitespace():
    body = (
        b"%PDF-1.4\n"
        b"1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
        b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
        b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]>>endobj\n"
    )
    xref_at = len(body)
    entries = b"".join(b"%010d 00000 n \n" % body.index(b"%d 0 obj" % number) for number in (1, 2, 3))
    data = (
        body
        + b"xref\n0 4\n0000000000 65535 f \n"
        + entries
        + b"trailer\n<</Root 1 0 R/Size 4>>\nstartxref\n%d\n%%%%EOF\n" % xref_at
    )

    document = inspect_pdf(data)
    assert [obj.type_tag for obj in document.objects] == ["Catalog", "Pages", "Page"]
    assert document.get_object(1).properties == {"Type": "Catalog", "Pages": Reference(2, 0)}
    assert document.get_object(2).properties["Kids"] == [Reference(3, 0)]
    assert document.get_object(3).enrichment["page_size"] == {"width": 612, "height": 792}
    assert document.relations.hierarchy.max_depth == 2
    assert document.validation.errors == []
    assert document.validation.is_valid


def test_objects_after_eof_are_scanned(minimal_pdf_bytes):
    update = b"4 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n"
    document = PDFParser(minimal_pdf_bytes + update).parse()
    assert document.get_object(4).type_tag == "Font"


def test_redefinitions_replace_the_index_entry(minimal_pdf_bytes):
    update = b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 100 100] >>\nendobj\n"
    document = PDFParser(minimal_pdf_bytes + update).parse()
    assert len(document.objects) == 4
    assert len(document.unique_objects()) == 3
    assert document.get_object(3).enrichment["page_size"] == {"width": 100, "height": 100}


def test_trailer_references_fix_unknown_types(pdf_builder):
    data = pdf_builder(
        ["<< /Pages 3 0 R >>", "<< /Title (Doc) >>", "<< /Type /Pages /Kids [] /Count 0 >>"],
        trailer="/Size 4 /Root 1 0 R /Info 2 0 R",
    )
    document = PDFParser(data).parse()
    assert document.get_object(1).type_tag == "Catalog"
    assert document.get_object(2).type_tag == "Info"


def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        PDFParser(b"").parse()


def test_budgets_raise_resource_exceeded(minimal_pdf_bytes):
    with pytest.raises(ResourceExceeded) as excinfo:
        PDFParser(minimal_pdf_bytes, InspectorConfig(max_bytes=10)).parse()
    assert excinfo.value.limit == "max_bytes"

    with pytest.raises(ResourceExceeded) as excinfo:
        PDFParser(minimal_pdf_bytes, InspectorConfig(max_objects=2)).parse()
    assert excinfo.value.limit == "max_objects"
    assert excinfo.value.value == 3


def test_parser_reads_pypdf_output(sample_pdf):
    document = PDFParser(sample_pdf).parse()
    assert document.version is not None
    assert len(document.find_objects_by_type("Page")) == 2
    assert len(document.find_objects_by_type("Catalog")) == 1
    assert document.xref is not None and document.xref.is_valid
    assert document.trailer.startxref == document.xref.start_position
