"""Print a document on a local printer with validated job settings."""

from .base_driver import (
    CapabilityWarning,
    DispatchSettings,
    DuplexMode,
    PageSize,
    PaperSource,
    PrinterCapabilities,
    PrinterDriver,
    PrintJobDescriptor,
    PrintJobResult,
    PrintOptions,
    Resolution,
    TriState,
)
from .directory import PrinterDirectory
from .dispatcher import JobDispatcher, PrintEvent, get_printer_driver
from .errors import (
    DirectoryUnavailableError,
    DocumentLoadError,
    InvalidCopyCountError,
    InvalidDuplexModeError,
    InvalidPageSizeError,
    NoPrinterSelectedError,
    PrintExecutionError,
    PrintingError,
    ResolutionError,
    TrayNotFoundError,
)
from .resolver import SettingsResolver, resolve_settings

__all__ = [
    "CapabilityWarning",
    "DispatchSettings",
    "DuplexMode",
    "JobDispatcher",
    "PageSize",
    "PaperSource",
    "PrintEvent",
    "PrintJobDescriptor",
    "PrintJobResult",
    "PrintOptions",
    "PrinterCapabilities",
    "PrinterDirectory",
    "PrinterDriver",
    "Resolution",
    "SettingsResolver",
    "TriState",
    "get_printer_driver",
    "resolve_settings",
    "PrintingError",
    "DirectoryUnavailableError",
    "ResolutionError",
    "NoPrinterSelectedError",
    "InvalidPageSizeError",
    "InvalidCopyCountError",
    "InvalidDuplexModeError",
    "TrayNotFoundError",
    "DocumentLoadError",
    "PrintExecutionError",
]
