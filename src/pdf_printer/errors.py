"""Printing subsystem exceptions."""

from __future__ import annotations

from typing import Sequence


class PrintingError(RuntimeError):
    """Base error for printing subsystem."""


class DirectoryUnavailableError(PrintingError):
    """Raised when the OS printer registry cannot be reached."""


class ResolutionError(PrintingError):
    """Base error for print settings that cannot be turned into a job."""


class NoPrinterSelectedError(ResolutionError):
    """Raised when no printer name is given or the name is not installed."""

    def __init__(self, message: str, printers: Sequence[str] = ()):
        super().__init__(message)
        self.printers = list(printers)


class InvalidPageSizeError(ResolutionError):
    """Raised when a page size is not of the form '<width>x<height>'."""


class InvalidCopyCountError(ResolutionError):
    """Raised when fewer than one copy is requested."""


class InvalidDuplexModeError(ResolutionError):
    """Raised for duplex values other than single/portrait/landscape."""


class TrayNotFoundError(ResolutionError):
    """Raised when the requested paper source does not exist on the printer."""

    def __init__(self, message: str, trays: Sequence[str] = ()):
        super().__init__(message)
        self.trays = list(trays)


class DocumentLoadError(PrintingError):
    """Raised when the document cannot be opened or decoded."""


class PrintExecutionError(PrintingError):
    """Raised when submitting a print job fails."""
