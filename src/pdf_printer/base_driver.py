"""Abstract printing driver contracts and shared models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

import fitz

_VALID_TRANSPORTS = {"auto", "direct", "raster"}


class TriState(Enum):
    """Optional on/off flag where UNSET leaves the printer default alone."""

    UNSET = "unset"
    ON = "on"
    OFF = "off"

    @classmethod
    def from_flag(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNSET
        return cls.ON if value else cls.OFF

    @property
    def is_set(self) -> bool:
        return self is not TriState.UNSET


class DuplexMode(Enum):
    """Sides to print on; values are the accepted command-line spellings."""

    SIMPLEX = "single"
    LONG_EDGE = "portrait"  # flip on the vertical axis
    SHORT_EDGE = "landscape"  # flip on the horizontal axis


@dataclass(frozen=True, slots=True)
class PageSize:
    """Custom page size in hundredths of an inch."""

    width: int
    height: int

    @property
    def inches(self) -> Tuple[float, float]:
        return self.width / 100.0, self.height / 100.0


@dataclass(frozen=True, slots=True)
class PaperSource:
    """
    Paper tray reported by a printer.

    `token` is driver-specific: CUPS drivers store an ``option=value`` pair,
    the Windows driver stores the bin id.
    """

    name: str
    token: str = ""

    @property
    def trimmed_name(self) -> str:
        return self.name.strip()


@dataclass(frozen=True, slots=True)
class PrinterCapabilities:
    """Read-only snapshot of what a printer can do."""

    supports_color: bool = False
    supports_duplex: bool = False
    paper_sizes: FrozenSet[str] = frozenset()
    paper_sources: Tuple[PaperSource, ...] = ()

    def source_names(self) -> List[str]:
        return [source.trimmed_name for source in self.paper_sources]


@dataclass(slots=True)
class PrintOptions:
    """Raw user-supplied print settings."""

    file_path: str
    printer_name: Optional[str] = None
    page_size: Optional[str] = None
    copies: int = 1
    collate: TriState = TriState.UNSET
    color: TriState = TriState.UNSET
    # None leaves duplex at the printer default; the CLI always passes "single".
    duplex: Optional[str] = DuplexMode.SIMPLEX.value
    tray: Optional[str] = None
    interactive: bool = False


@dataclass(frozen=True, slots=True)
class PrintJobDescriptor:
    """
    Fully validated job settings.

    None/UNSET fields mean "use the printer default". Every capability
    backed field has already been checked against the printer.
    """

    printer_name: str
    page_size: Optional[PageSize] = None
    zero_margins: bool = False
    copies: int = 1
    collate: TriState = TriState.UNSET
    color: TriState = TriState.UNSET
    duplex: Optional[DuplexMode] = None
    paper_source: Optional[PaperSource] = None


@dataclass(frozen=True, slots=True)
class CapabilityWarning:
    """Requested setting that was dropped because the printer lacks it."""

    setting: str
    requested: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Resolution:
    descriptor: PrintJobDescriptor
    warnings: Tuple[CapabilityWarning, ...] = ()


@dataclass(slots=True)
class DispatchSettings:
    """Dispatcher tuning that does not belong to the job itself."""

    dpi: int = 300
    job_name: Optional[str] = None
    transport: str = "auto"  # auto | direct | raster

    def normalized(self, document_name: Optional[str] = None) -> "DispatchSettings":
        """Return a normalized copy used by drivers."""
        try:
            dpi = max(72, int(self.dpi))
        except (TypeError, ValueError):
            dpi = 300
        transport = (self.transport or "auto").strip().lower()
        if transport not in _VALID_TRANSPORTS:
            transport = "auto"
        job_name = (self.job_name or "").strip() or (document_name or "").strip()
        return DispatchSettings(
            dpi=dpi,
            job_name=job_name or "pdf_printer_job",
            transport=transport,
        )


@dataclass(slots=True)
class PrintJobResult:
    """Outcome of a dispatch attempt."""

    success: bool
    route: str
    message: str
    stage: Optional[str] = None  # None | "load" | "print"
    job_id: Optional[str] = None

    @classmethod
    def failed(cls, stage: str, message: str, route: str = "none") -> "PrintJobResult":
        return cls(success=False, route=route, message=message, stage=stage)


class PrinterDriver(ABC):
    """Abstract base class for platform-specific print drivers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Driver display name."""

    @abstractmethod
    def list_printers(self) -> List[str]:
        """Enumerate installed printer names, raising DirectoryUnavailableError."""

    @abstractmethod
    def get_capabilities(self, printer_name: str) -> PrinterCapabilities:
        """Return the capability snapshot of an installed printer."""

    @abstractmethod
    def submit(
        self,
        document: fitz.Document,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        """Submit the document as a single job, raising PrintExecutionError."""
