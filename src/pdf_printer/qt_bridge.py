"""Qt print bridge: send rendered pages into OS spooler via QPrinter."""

from __future__ import annotations

import logging
from typing import List, Optional

import fitz
from PySide6.QtCore import QMarginsF, QRectF, QSizeF
from PySide6.QtGui import QPageLayout, QPageSize, QPainter
from PySide6.QtPrintSupport import QPrinter, QPrinterInfo
from PySide6.QtWidgets import QApplication

from .base_driver import (
    DispatchSettings,
    DuplexMode,
    PaperSource,
    PrinterCapabilities,
    PrintJobDescriptor,
    PrintJobResult,
    TriState,
)
from .errors import DirectoryUnavailableError, PrintExecutionError
from .layout import compute_fit_rect
from .pdf_renderer import RenderedPage, iter_page_images

logger = logging.getLogger(__name__)

_APP_INSTANCE = None

_TWO_SIDED_MODES = (
    QPrinter.DuplexMode.DuplexLongSide,
    QPrinter.DuplexMode.DuplexShortSide,
    QPrinter.DuplexMode.DuplexAuto,
)

# Windows DMBIN_* ids that have a QPrinter.PaperSource counterpart.
_DMBIN_TO_QT = {
    1: "Upper",
    2: "Lower",
    3: "Middle",
    4: "Manual",
    5: "Envelope",
    6: "EnvelopeManual",
    7: "Auto",
    8: "Tractor",
    9: "SmallFormat",
    10: "LargeFormat",
    11: "LargeCapacity",
    14: "Cassette",
    15: "FormSource",
}


def _ensure_qapplication() -> None:
    global _APP_INSTANCE
    app = QApplication.instance()
    if app is None:
        _APP_INSTANCE = QApplication([])
    else:
        _APP_INSTANCE = app


def qt_printer_names() -> List[str]:
    _ensure_qapplication()
    return list(QPrinterInfo.availablePrinterNames())


def qt_capabilities(printer_name: str) -> PrinterCapabilities:
    """Capabilities as reported by Qt's platform print plugin."""
    _ensure_qapplication()
    info = QPrinterInfo.printerInfo(printer_name)
    if info.isNull():
        raise DirectoryUnavailableError(f"Printer '{printer_name}' is not available.")

    sources = tuple(
        PaperSource(name=source.name, token=f"qt:{source.value}")
        for source in QPrinter(info).supportedPaperSources()
    )
    return PrinterCapabilities(
        supports_color=QPrinter.ColorMode.Color in info.supportedColorModes(),
        supports_duplex=any(mode in _TWO_SIDED_MODES for mode in info.supportedDuplexModes()),
        paper_sizes=frozenset(size.name() for size in info.supportedPageSizes()),
        paper_sources=sources,
    )


def _to_duplex_mode(duplex: DuplexMode) -> QPrinter.DuplexMode:
    if duplex is DuplexMode.LONG_EDGE:
        return QPrinter.DuplexMode.DuplexLongSide
    if duplex is DuplexMode.SHORT_EDGE:
        return QPrinter.DuplexMode.DuplexShortSide
    return QPrinter.DuplexMode.DuplexNone


def to_qt_paper_source(source: PaperSource) -> Optional[QPrinter.PaperSource]:
    """Map a driver token ('qt:<n>' or 'bin:<id>') onto QPrinter.PaperSource."""
    kind, _, value = source.token.partition(":")
    if not value.isdigit():
        return None
    if kind == "qt":
        return QPrinter.PaperSource(int(value))
    if kind == "bin":
        qt_name = _DMBIN_TO_QT.get(int(value))
        if qt_name is None:
            logger.warning(
                "Tray %r (bin %s) has no Qt equivalent; using custom source",
                source.trimmed_name,
                value,
            )
            return QPrinter.PaperSource.CustomSource
        return getattr(QPrinter.PaperSource, qt_name)
    return None


def _custom_page_size(descriptor: PrintJobDescriptor) -> QPageSize:
    width_in, height_in = descriptor.page_size.inches
    return QPageSize(
        QSizeF(width_in, height_in),
        QPageSize.Unit.Inch,
        "Custom size",
        QPageSize.SizeMatchPolicy.ExactMatch,
    )


def apply_descriptor(
    printer: QPrinter,
    descriptor: PrintJobDescriptor,
    settings: DispatchSettings,
) -> None:
    printer.setPrinterName(descriptor.printer_name)
    printer.setDocName(settings.job_name)
    printer.setResolution(settings.dpi)
    printer.setCopyCount(descriptor.copies)
    if descriptor.collate.is_set:
        printer.setCollateCopies(descriptor.collate is TriState.ON)
    if descriptor.color.is_set:
        printer.setColorMode(
            QPrinter.ColorMode.Color
            if descriptor.color is TriState.ON
            else QPrinter.ColorMode.GrayScale
        )
    if descriptor.duplex is not None:
        printer.setDuplex(_to_duplex_mode(descriptor.duplex))
    if descriptor.page_size is not None:
        if not printer.setPageSize(_custom_page_size(descriptor)):
            logger.warning(
                "Printer %s did not accept custom page size %s",
                descriptor.printer_name,
                descriptor.page_size,
            )
    if descriptor.zero_margins:
        printer.setFullPage(True)
        printer.setPageMargins(QMarginsF(0, 0, 0, 0), QPageLayout.Unit.Millimeter)
    if descriptor.paper_source is not None:
        qt_source = to_qt_paper_source(descriptor.paper_source)
        if qt_source is None:
            logger.debug(
                "Tray token %r is not selectable through Qt",
                descriptor.paper_source.token,
            )
        else:
            printer.setPaperSource(qt_source)


def _draw_page_image(
    painter: QPainter,
    printer: QPrinter,
    rendered: RenderedPage,
) -> None:
    target_rect = QRectF(printer.pageRect(QPrinter.Unit.DevicePixel))
    image = rendered.image
    x, y, width, height = compute_fit_rect(
        target_width=target_rect.width(),
        target_height=target_rect.height(),
        source_width=image.width(),
        source_height=image.height(),
    )
    painter.drawImage(QRectF(x, y, width, height), image)


def raster_print(
    document: fitz.Document,
    descriptor: PrintJobDescriptor,
    settings: DispatchSettings,
    printer: Optional[QPrinter] = None,
) -> PrintJobResult:
    """
    Render document pages and draw them to QPrinter (OS spooler).

    A preconfigured `printer` may be passed in, e.g. one writing PDF output.
    """
    _ensure_qapplication()

    if printer is None:
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
    apply_descriptor(printer, descriptor, settings)
    if not printer.isValid():
        raise PrintExecutionError(f"Printer '{descriptor.printer_name}' is not valid.")

    painter = QPainter()
    if not painter.begin(printer):
        raise PrintExecutionError(
            f"Cannot start printer context: {descriptor.printer_name}"
        )

    pages = 0
    try:
        for rendered in iter_page_images(document, settings.dpi):
            if pages and not printer.newPage():
                raise PrintExecutionError("Printer refused to start a new page.")
            _draw_page_image(painter, printer, rendered)
            pages += 1
    except PrintExecutionError:
        raise
    except Exception as exc:
        raise PrintExecutionError(f"Raster print failed: {exc}") from exc
    finally:
        ended = painter.end()

    if not ended:
        raise PrintExecutionError(
            f"Spooler did not accept the job for '{descriptor.printer_name}'."
        )
    return PrintJobResult(
        success=True,
        route="qt-raster->spooler",
        message=f"Submitted {pages} page(s) to printer.",
    )
