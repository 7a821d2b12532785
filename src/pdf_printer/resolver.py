"""Translate loosely typed print options into a validated job descriptor."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional, Sequence, Tuple

from .base_driver import (
    CapabilityWarning,
    DuplexMode,
    PageSize,
    PaperSource,
    PrinterCapabilities,
    PrintJobDescriptor,
    PrintOptions,
    Resolution,
    TriState,
)
from .directory import PrinterDirectory
from .errors import (
    InvalidCopyCountError,
    InvalidDuplexModeError,
    InvalidPageSizeError,
    NoPrinterSelectedError,
    TrayNotFoundError,
)

logger = logging.getLogger(__name__)

MM_PER_INCH = Decimal("25.4")

_DUPLEX_VALUES = {mode.value: mode for mode in DuplexMode}


def mm_to_hundredths_inch(value_mm) -> int:
    """Convert millimetres to hundredths of an inch, rounding half up."""
    value = value_mm if isinstance(value_mm, Decimal) else Decimal(str(value_mm))
    return int((value * 100 / MM_PER_INCH).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def select_printer(name: Optional[str], printers: Sequence[str]) -> str:
    """Return `name` if it is an installed printer (case-sensitive match)."""
    if name is None or not name.strip():
        raise NoPrinterSelectedError("No printer name was given.", printers)
    if name not in printers:
        raise NoPrinterSelectedError(f"Printer name is invalid ({name})", printers)
    return name


def parse_page_size(text: Optional[str]) -> Optional[PageSize]:
    """
    Parse '<width>x<height>' in millimetres.

    Returns None when no size was given so the printer keeps its default
    paper.
    """
    if text is None:
        return None
    parts = text.strip().lower().split("x")
    if len(parts) != 2:
        raise InvalidPageSizeError(
            f"Invalid page size {text!r}: expected '<width>x<height>' in millimetres."
        )
    values: List[Decimal] = []
    for part in parts:
        try:
            value = Decimal(part.strip())
        except InvalidOperation as exc:
            raise InvalidPageSizeError(
                f"Invalid page size {text!r}: {part.strip()!r} is not a number."
            ) from exc
        if not value.is_finite() or value <= 0:
            raise InvalidPageSizeError(
                f"Invalid page size {text!r}: dimensions must be positive."
            )
        values.append(value)
    width, height = (mm_to_hundredths_inch(value) for value in values)
    if width < 1 or height < 1:
        raise InvalidPageSizeError(
            f"Invalid page size {text!r}: smaller than 1/100 inch."
        )
    return PageSize(width=width, height=height)


def resolve_copies(copies, collate: TriState = TriState.UNSET) -> Tuple[int, TriState]:
    """Validate the copy count; collation only applies to multiple copies."""
    if isinstance(copies, bool) or not isinstance(copies, int):
        raise InvalidCopyCountError(f"Copy count must be an integer (got {copies!r}).")
    count = copies
    if count < 1:
        raise InvalidCopyCountError(
            f"Cannot print less than one copy. Number provided was {count}"
        )
    if count == 1:
        return count, TriState.UNSET
    return count, collate


def gate_color(
    requested: TriState,
    supports_color: bool,
) -> Tuple[TriState, Optional[CapabilityWarning]]:
    if requested is TriState.ON and not supports_color:
        return TriState.UNSET, CapabilityWarning(
            setting="color",
            requested="on",
            message="Colour printing requested but printer does not support colour printing.",
        )
    return requested, None


def parse_duplex(text: Optional[str]) -> Optional[DuplexMode]:
    if text is None:
        return None
    mode = _DUPLEX_VALUES.get(text)
    if mode is None:
        valid = ", ".join(_DUPLEX_VALUES)
        raise InvalidDuplexModeError(
            f"Invalid duplex setting ({text}). Valid values are {valid}"
        )
    return mode


def gate_duplex(
    requested: Optional[DuplexMode],
    supports_duplex: bool,
) -> Tuple[Optional[DuplexMode], Optional[CapabilityWarning]]:
    if requested is None or supports_duplex:
        return requested, None
    # Simplex is what a non-duplex device does anyway.
    if requested is DuplexMode.SIMPLEX:
        return None, None
    return None, CapabilityWarning(
        setting="duplex",
        requested=requested.value,
        message=(
            f"Duplex setting provided ({requested.value}) but printer does not "
            "support duplex printing."
        ),
    )


def select_tray(name: Optional[str], capabilities: PrinterCapabilities) -> Optional[PaperSource]:
    if name is None:
        return None
    wanted = name.strip()
    for source in capabilities.paper_sources:
        if source.trimmed_name == wanted:
            return source
    raise TrayNotFoundError(
        f'Paper source "{name}" is invalid.',
        capabilities.source_names(),
    )


def resolve_settings(
    options: PrintOptions,
    printers: Sequence[str],
    capabilities: PrinterCapabilities,
) -> Resolution:
    """
    Build the job descriptor for `options` on a printer with `capabilities`.

    Stops at the first invalid setting by raising a ResolutionError. Settings
    the printer cannot honour fall back to the printer default and are
    reported as warnings instead.
    """
    printer_name = select_printer(options.printer_name, printers)
    page_size = parse_page_size(options.page_size)
    copies, collate = resolve_copies(options.copies, options.collate)

    warnings: List[CapabilityWarning] = []
    color, color_warning = gate_color(options.color, capabilities.supports_color)
    if color_warning is not None:
        warnings.append(color_warning)

    duplex, duplex_warning = gate_duplex(
        parse_duplex(options.duplex),
        capabilities.supports_duplex,
    )
    if duplex_warning is not None:
        warnings.append(duplex_warning)

    paper_source = select_tray(options.tray, capabilities)

    descriptor = PrintJobDescriptor(
        printer_name=printer_name,
        page_size=page_size,
        zero_margins=page_size is not None,
        copies=copies,
        collate=collate,
        color=color,
        duplex=duplex,
        paper_source=paper_source,
    )
    for warning in warnings:
        logger.info("Capability fallback on %s: %s", printer_name, warning.message)
    logger.debug("Resolved descriptor: %s", descriptor)
    return Resolution(descriptor=descriptor, warnings=tuple(warnings))


class SettingsResolver:
    """Resolve options against printers known to a PrinterDirectory."""

    def __init__(self, directory: PrinterDirectory):
        self.directory = directory

    def resolve(self, options: PrintOptions, printers: Optional[Sequence[str]] = None) -> Resolution:
        if printers is None:
            printers = self.directory.list_printers()
        printer_name = select_printer(options.printer_name, printers)
        capabilities = self.directory.capabilities(printer_name)
        return resolve_settings(options, printers, capabilities)
