"""High level entry points: parse, analyse, export."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import DEFAULT_CONFIG, InspectorConfig
from .core.analyser import Analyser
from .core.model import Document
from .core.parser import PDFParser
from .core.report import export_document
from .core.utils import get_logger
from .core.validator import validate_document

LOGGER = get_logger("pdfinspectx.api")

Source = bytes | bytearray | memoryview | str | Path


def parse(source: Source, config: InspectorConfig | None = None) -> Document:
    """Scan ``source`` into a :class:`Document`.

    Raises :class:`~pdfinspectx.exceptions.EmptyInputError` for empty input
    and :class:`~pdfinspectx.exceptions.ResourceExceeded` when a budget in
    ``config`` is exceeded.  Structural problems never raise.
    """

    return PDFParser(source, config).parse()


def analyse(document: Document, config: InspectorConfig | None = None) -> Document:
    """Fill relations, logical view, statistics and validation in place."""

    config = config or DEFAULT_CONFIG
    Analyser(config).run(document)
    validate_document(document, config)
    document.analysed = True
    LOGGER.debug(
        "Analysed %d objects: valid=%s, %d errors, %d warnings",
        document.stats.total_objects,
        document.validation.is_valid,
        len(document.validation.errors),
        len(document.validation.warnings),
    )
    return document


def export(document: Document) -> dict[str, Any]:
    return export_document(document)


def inspect_pdf(source: Source, config: InspectorConfig | None = None) -> Document:
    """Parse and analyse in one step."""

    return analyse(parse(source, config), config)


__all__ = ["parse", "analyse", "export", "inspect_pdf"]
