"""Windows print driver implementation."""

from __future__ import annotations

import logging
from typing import List

import fitz

from ..base_driver import (
    DispatchSettings,
    PaperSource,
    PrinterCapabilities,
    PrinterDriver,
    PrintJobDescriptor,
    PrintJobResult,
)
from ..errors import DirectoryUnavailableError, PrintExecutionError
from ..qt_bridge import qt_capabilities, qt_printer_names, raster_print

try:
    import win32con  # type: ignore
    import win32print  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    win32con = None
    win32print = None

logger = logging.getLogger(__name__)


def _clean(names) -> List[str]:
    return [str(name).rstrip("\x00") for name in names or []]


class WindowsPrinterDriver(PrinterDriver):
    """Windows bridge; rendering path uses Qt->Win32 spooler."""

    @property
    def name(self) -> str:
        return "windows_qt_gdi"

    def list_printers(self) -> List[str]:
        if win32print is None:
            # Fallback path without pywin32.
            return qt_printer_names()

        flags = win32print.PRINTER_ENUM_LOCAL | win32print.PRINTER_ENUM_CONNECTIONS
        try:
            return [item[2] for item in win32print.EnumPrinters(flags)]
        except Exception as exc:
            raise DirectoryUnavailableError(
                f"Cannot enumerate printers (is the Print Spooler running?): {exc}"
            ) from exc

    @staticmethod
    def _port_name(printer_name: str) -> str:
        handle = win32print.OpenPrinter(printer_name)
        try:
            return win32print.GetPrinter(handle, 2)["pPortName"]
        finally:
            win32print.ClosePrinter(handle)

    def get_capabilities(self, printer_name: str) -> PrinterCapabilities:
        if win32print is None:
            return qt_capabilities(printer_name)

        try:
            port = self._port_name(printer_name)

            def caps(capability):
                return win32print.DeviceCapabilities(printer_name, port, capability)

            bins = caps(win32con.DC_BINS) or []
            bin_names = _clean(caps(win32con.DC_BINNAMES))
            sources = tuple(
                PaperSource(name=bin_name, token=f"bin:{int(bin_id)}")
                for bin_id, bin_name in zip(bins, bin_names)
            )
            return PrinterCapabilities(
                supports_color=caps(win32con.DC_COLORDEVICE) == 1,
                supports_duplex=caps(win32con.DC_DUPLEX) == 1,
                paper_sizes=frozenset(_clean(caps(win32con.DC_PAPERNAMES))),
                paper_sources=sources,
            )
        except Exception as exc:
            raise DirectoryUnavailableError(
                f"Cannot query printer '{printer_name}': {exc}"
            ) from exc

    def submit(
        self,
        document: fitz.Document,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        # Qt print path on Windows still goes through system print spooler.
        if settings.transport == "direct":
            raise PrintExecutionError("Direct printing is not available on Windows.")
        logger.debug("Submitting through Qt raster route")
        return raster_print(document, descriptor, settings)
