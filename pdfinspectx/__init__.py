"""
pdfinspectx - structural inspection and validation of PDF files.

The scanner reads the raw byte stream without a PDF library, recovers every
indirect object, the cross-reference table and the trailer, then the
analyser builds the reference graph and the validator checks the result
against ISO 32000-1 structural rules.

Quick Start:
    >>> import pdfinspectx
    >>> document = pdfinspectx.inspect_pdf("input.pdf")
    >>> document.validation.is_valid
    True

Main Functions:
    - parse: Scan bytes or a path into a Document
    - analyse: Fill references, hierarchy, statistics and validation
    - export: JSON compatible snapshot of an analysed document
    - inspect_pdf: parse followed by analyse

Exceptions:
    - PDFInspectError: Base exception
    - ParseError / EmptyInputError: Input cannot be scanned
    - ResourceExceeded: A configured budget was exceeded

For CLI usage, use the 'pdfinspectx' command after installation.
"""

from __future__ import annotations

# Core API
from pdfinspectx.api import analyse, export, inspect_pdf, parse

# Configuration
from pdfinspectx.config import DEFAULT_CONFIG, InspectorConfig

# Data types
from pdfinspectx.core.model import Diagnostic, Document, PDFObject
from pdfinspectx.core.values import Reference

# Exceptions
from pdfinspectx.exceptions import (
    EmptyInputError,
    ParseError,
    PDFInspectError,
    ResourceExceeded,
    ToolNotFoundError,
)

# Tools
from pdfinspectx.tools import load_builtin_plugins
from pdfinspectx.tools.common.interfaces import InspectionContext
from pdfinspectx.tools.common.pipeline import ToolRegistry, register_tool, registry

load_builtin_plugins()

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "parse",
    "analyse",
    "export",
    "inspect_pdf",
    "InspectorConfig",
    "DEFAULT_CONFIG",
    "Diagnostic",
    "Document",
    "PDFObject",
    "Reference",
    "PDFInspectError",
    "ParseError",
    "EmptyInputError",
    "ResourceExceeded",
    "ToolNotFoundError",
    "InspectionContext",
    "ToolRegistry",
    "register_tool",
    "registry",
    "load_builtin_plugins",
    "__version__",
]
