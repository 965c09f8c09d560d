"""
Custom Exceptions Module.

This module defines the exceptions raised by the invoice import
subsystem. Recoverable extraction problems (corrupt containers,
unsupported PDF filters, failed decompression) are NOT raised; they
are reported as ExtractionDiagnostic records instead. Only conditions
the caller has to handle become exceptions.

Exception Hierarchy:
    InvoiceImportError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   └── InputFileNotFoundError
    ├── TemplateError
    ├── OutputError
    │   └── ExcelExportError
    └── ConfigurationError
"""


class InvoiceImportError(Exception):
    """
    Base exception for all invoice import errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceImportError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when no extractor accepts the uploaded file.

    Example:
        >>> raise UnsupportedFileTypeError("setup.exe", "application/octet-stream", [".pdf"])
    """

    MESSAGE = "Unsupported file type."

    def __init__(self, filename: str, mime_type: str = None, supported_types: list = None):
        details = {
            "filename": filename,
            "mime_type": mime_type,
            "supported_types": supported_types or [],
        }
        super().__init__(self.MESSAGE, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file cannot be found on disk."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


# =============================================================================
# TEMPLATE ERRORS
# =============================================================================

class TemplateError(InvoiceImportError):
    """Raised when an exported invoice template cannot be re-hydrated."""

    def __init__(self, reason: str, source: str = None):
        message = f"Invalid invoice template: {reason}"
        details = {"source": source} if source else {}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(InvoiceImportError):
    """Base exception for output handling errors."""
    pass


class ExcelExportError(OutputError):
    """Raised when Excel export fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class ConfigurationError(InvoiceImportError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value, reason: str = None):
        message = f"Invalid configuration value for '{key}'"
        details = {"key": key, "value": value, "reason": reason}
        super().__init__(message, details)


# Export all exceptions
__all__ = [
    'InvoiceImportError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'TemplateError',
    'OutputError',
    'ExcelExportError',
    'ConfigurationError',
]
