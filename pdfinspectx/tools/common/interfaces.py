"""Core interfaces and context objects shared by pdfinspectx tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ...config import InspectorConfig
from ...core.parser import PDFParser
from ...core.utils import resolve_path


@dataclass
class InspectionContext:
    """Holds shared execution state for a tool invocation."""

    input_path: Path | None = None
    output_path: Path | None = None
    parser: PDFParser | None = None
    settings: InspectorConfig | None = None
    resources: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.input_path, (str, Path)) and self.input_path is not None:
            self.input_path = resolve_path(self.input_path)
        if isinstance(self.output_path, (str, Path)) and self.output_path is not None:
            self.output_path = resolve_path(self.output_path)

    def ensure_parser(self) -> PDFParser:
        if self.parser is None:
            if self.input_path is None:
                raise ValueError("InspectionContext requires an input_path to create a parser")
            self.parser = PDFParser(self.input_path, self.settings)
        return self.parser


class BaseTool:
    """Base class for all pluggable inspection tools."""

    name: str
    description: str = ""

    def __init__(self, context: InspectionContext) -> None:
        self.context = context

    def run(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError
