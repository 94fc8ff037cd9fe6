from __future__ import annotations

import json

from pdfinspectx.api import export, inspect_pdf
from pdfinspectx.core.lookups import (
    check_required_objects,
    content_stats,
    core_objects,
    file_info,
    font_info,
    image_info,
    page_info,
    stream_info,
)
from pdfinspectx.core.report import detailed_report, summary, text_report, to_json


RICH_OBJECTS = [
    "<< /Type /Catalog /Pages 2 0 R >>",
    "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
    "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] /Contents 4 0 R "
    "/Resources << /Font << /F1 5 0 R >> /XObject << /Im0 6 0 R >> >> >>",
    "<< /Length 7 >>\nstream\nBT ET q\nendstream",
    "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    "<< /Type /XObject /Subtype /Image /Width 2 /Height 3 /ColorSpace /DeviceRGB "
    "/BitsPerComponent 8 /Filter /DCTDecode /Length 4 >>\nstream\nJPEG\nendstream",
]


def test_summary_of_minimal_document(minimal_pdf_bytes):
    data = summary(inspect_pdf(minimal_pdf_bytes))
    assert data["version"] == "1.4"
    assert data["total_objects"] == 3
    assert data["pages"] == 1
    assert data["references"] == 3
    assert data["circular_refs"] == 0
    assert data["max_depth"] == 2
    assert data["is_valid"] is True
    assert data["errors"] == 0


def test_content_lookups(pdf_builder):
    document = inspect_pdf(pdf_builder(RICH_OBJECTS))

    pages = page_info(document)
    assert pages["total"] == 1
    page = pages["pages"][0]
    assert page["ref"] == "3 0 R"
    assert page["page_size"] == {"width": 595, "height": 842}
    assert page["media_box"] == [0, 0, 595, 842]
    assert page["contents"] == {"$ref": "4 0 R"}
    assert page["rotation"] == 0

    assert font_info(document) == [
        {"ref": "5 0 R", "name": "/Helvetica", "type": "/Type1", "encoding": None, "to_unicode": None}
    ]
    images = image_info(document)
    assert images[0]["width"] == 2
    assert images[0]["filter"] == "/DCTDecode"

    streams = {item["ref"]: item for item in stream_info(document)}
    assert streams["4 0 R"]["actual_length"] == 7
    assert streams["6 0 R"]["type"] == "XObject"

    assert content_stats(document) == {
        "pages": 1,
        "fonts": 1,
        "images": 1,
        "streams": 2,
        "annotations": 0,
        "actions": 0,
        "destinations": 0,
    }
    required = check_required_objects(document)
    assert required["has_catalog"] and required["has_pages"] and required["page_count"] == 1


def test_core_objects_group_by_role(pdf_builder):
    document = inspect_pdf(pdf_builder(RICH_OBJECTS))
    groups = core_objects(document)
    assert groups["catalog"].object_number == 1
    assert groups["pages"].object_number == 2
    assert [obj.object_number for obj in groups["fonts"]] == [5]
    assert [obj.object_number for obj in groups["streams"]] == [4, 6]
    assert groups["metadata"] is None


def test_file_info(minimal_pdf_bytes):
    info = file_info(inspect_pdf(minimal_pdf_bytes))
    assert info["file_size"] == len(minimal_pdf_bytes)
    assert info["header"]["version"] == "1.4"
    assert info["startxref"] == minimal_pdf_bytes.index(b"\nxref\n") + 1
    assert info["trailer"]["properties"]["Root"] == {"$ref": "1 0 R"}


def test_export_is_json_compatible(pdf_builder):
    document = inspect_pdf(pdf_builder(RICH_OBJECTS))
    snapshot = export(document)
    decoded = json.loads(json.dumps(snapshot))
    assert decoded["summary"]["fonts"] == 1
    assert decoded["core_objects"]["catalog"] == "1 0 R"
    assert decoded["core_objects"]["streams"] == ["4 0 R", "6 0 R"]
    assert len(decoded["physical"]["objects"]) == 6
    assert decoded["relations"]["hierarchy"]["root"] == "1 0 R"

    assert json.loads(to_json(document, indent=None))["summary"]["is_valid"] == document.validation.is_valid


def test_detailed_report_sections(minimal_pdf_bytes):
    report = detailed_report(inspect_pdf(minimal_pdf_bytes))
    assert set(report) == {"file_info", "structure", "content", "validation", "analysis"}
    assert report["validation"]["is_valid"] is True
    assert report["analysis"]["object_types"] == {"Catalog": 1, "Pages": 1, "Page": 1}
    assert report["analysis"]["circular_references"] == []


def test_text_report(broken_pdf):
    text = text_report(inspect_pdf(broken_pdf))
    assert text.startswith("=== PDF Analysis Report ===")
    assert "  Valid: no" in text
    assert "[TRAILER_ROOT_REF_INVALID]" in text
