from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Sequence
import sys

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


MINIMAL_OBJECTS = [
    "<< /Type /Catalog /Pages 2 0 R >>",
    "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
    "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>",
]


def build_pdf(
    objects: Sequence[str] | Mapping[int, str],
    *,
    trailer: str | None = None,
    version: str = "1.4",
    startxref: int | str | None = None,
    include_xref: bool = True,
) -> bytes:
    """Assemble a classic PDF with exact offsets.

    ``objects`` are dictionary bodies numbered from 1, or a mapping from
    object number to body.  Numbers missing from the mapping become free
    entries pointing back to object 0.
    """

    numbered = sorted(objects.items()) if isinstance(objects, Mapping) else list(enumerate(objects, start=1))
    out = bytearray(f"%PDF-{version}\n".encode("latin-1"))
    offsets: dict[int, int] = {}
    for number, body in numbered:
        offsets[number] = len(out)
        out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")

    size = max(offsets) + 1 if offsets else 1
    xref_at = len(out)
    if include_xref:
        out += f"xref\n0 {size}\n".encode("latin-1")
        out += b"0000000000 65535 f \n"
        for number in range(1, size):
            if number in offsets:
                out += f"{offsets[number]:010d} 00000 n \n".encode("latin-1")
            else:
                out += b"0000000000 65535 f \n"

    trailer_body = trailer if trailer is not None else f"/Size {size} /Root 1 0 R"
    out += f"trailer\n<< {trailer_body} >>\n".encode("latin-1")
    out += f"startxref\n{xref_at if startxref is None else startxref}\n%%EOF\n".encode("latin-1")
    return bytes(out)


@pytest.fixture()
def pdf_builder() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def minimal_pdf_bytes() -> bytes:
    return build_pdf(MINIMAL_OBJECTS)


@pytest.fixture()
def minimal_pdf(tmp_path: Path, minimal_pdf_bytes: bytes) -> Path:
    pdf_path = tmp_path / "minimal.pdf"
    pdf_path.write_bytes(minimal_pdf_bytes)
    return pdf_path


@pytest.fixture()
def broken_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "broken.pdf"
    pdf_path.write_bytes(build_pdf(MINIMAL_OBJECTS, trailer="/Size 9 /Root 7 0 R"))
    return pdf_path


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    for _ in range(2):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdfinspectx-tests", "/Title": "Sample"})
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path
