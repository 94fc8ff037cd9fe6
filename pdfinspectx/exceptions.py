"""
Custom exceptions for pdfinspectx.

Only conditions that make scanning impossible are raised.  Structural
problems found inside a file are reported as diagnostics instead.
"""


class PDFInspectError(Exception):
    """Base exception for all pdfinspectx errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF inspection error occurred."


class ParseError(PDFInspectError):
    """Raised when the byte stream cannot be scanned at all."""

    @property
    def default_message(self) -> str:
        return "The input could not be scanned as a PDF byte stream."


class EmptyInputError(ParseError):
    """Raised when there are no bytes to scan."""

    @property
    def default_message(self) -> str:
        return "No bytes were provided to the parser."


class ResourceExceeded(PDFInspectError):
    """Raised when a scan or graph walk exceeds its configured budget."""

    def __init__(self, message: str = "", *, limit: str = "", value: int = 0) -> None:
        super().__init__(message)
        self.limit = limit
        self.value = value

    @property
    def default_message(self) -> str:
        return "Inspection budget exceeded."


class ToolNotFoundError(PDFInspectError):
    """Raised when a tool name is not present in the registry."""

    @property
    def default_message(self) -> str:
        return "Requested tool is not registered."
