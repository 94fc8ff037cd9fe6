"""Plugin exposing inspection capabilities through the registry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..api import analyse, export
from ..core.crosscheck import CrossCheckResult, cross_check_with_pypdf
from ..core.model import Document, ValidationSection
from ..core.parser import PDFParser
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.pipeline import register_tool

LOGGER = get_logger("pdfinspectx.tools.inspect")


class _DocumentTool(BaseTool):
    """Shared parse-and-analyse step; the document is cached on the context."""

    def _parser(self) -> PDFParser:
        context = self.context
        data = context.config.get("data")
        if data is not None and context.parser is None:
            context.parser = PDFParser(data, context.settings)
        return context.ensure_parser()

    def document(self) -> Document:
        cached = self.context.resources.get("document")
        if isinstance(cached, Document):
            return cached
        parser = self._parser()
        LOGGER.debug("Inspecting %s", parser.source_path or "<bytes>")
        document = analyse(parser.parse(), self.context.settings)
        self.context.resources["document"] = document
        return document


@register_tool("inspect")
class InspectTool(_DocumentTool):
    name = "inspect"
    description = "Parse and analyse a PDF"

    def run(self) -> Document:
        return self.document()


@register_tool("validate")
class ValidateTool(_DocumentTool):
    name = "validate"
    description = "Report structural errors and warnings"

    def run(self) -> ValidationSection:
        validation = self.document().validation
        self.context.resources["result"] = validation
        return validation


@register_tool("export")
class ExportTool(_DocumentTool):
    name = "export"
    description = "Export a JSON snapshot of the analysed structure"

    def run(self) -> dict[str, Any]:
        snapshot = export(self.document())
        output: Path | None = self.context.output_path
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            indent = self.context.config.get("indent", 2)
            output.write_text(json.dumps(snapshot, indent=indent, ensure_ascii=False), encoding="utf-8")
            LOGGER.debug("Wrote snapshot to %s", output)
        self.context.resources["result"] = snapshot
        return snapshot


@register_tool("crosscheck")
class CrossCheckTool(_DocumentTool):
    name = "crosscheck"
    description = "Compare the scanner with pypdf's reader"

    def run(self) -> CrossCheckResult:
        document = self.document()
        result = cross_check_with_pypdf(document, self._parser().data)
        self.context.resources["result"] = result
        return result
