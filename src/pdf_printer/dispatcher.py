"""Print dispatcher and factory entrypoints."""

from __future__ import annotations

import logging
import platform
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import fitz

from .base_driver import DispatchSettings, PrintJobDescriptor, PrintJobResult, PrinterDriver
from .errors import DocumentLoadError, PrintExecutionError
from .pdf_renderer import open_document
from .platforms.linux_driver import LinuxPrinterDriver
from .platforms.mac_driver import MacPrinterDriver
from .platforms.win_driver import WindowsPrinterDriver

logger = logging.getLogger(__name__)


class PrintEvent(Enum):
    STARTED = "started"
    FINISHED = "finished"


PrintListener = Callable[[PrintEvent, PrintJobDescriptor], None]


def get_printer_driver() -> PrinterDriver:
    """Factory for platform-specific print driver."""
    system = platform.system().lower()
    if system == "windows":
        return WindowsPrinterDriver()
    if system == "darwin":
        return MacPrinterDriver()
    return LinuxPrinterDriver()


class JobDispatcher:
    """
    Runs one print job and reports how it went.

    Failures while loading or printing are returned as a failed
    PrintJobResult (stage "load" or "print") rather than raised.
    """

    def __init__(
        self,
        driver: Optional[PrinterDriver] = None,
        settings: Optional[DispatchSettings] = None,
        listeners: Iterable[PrintListener] = (),
    ):
        self.driver = driver or get_printer_driver()
        self.settings = settings or DispatchSettings()
        self._listeners: List[PrintListener] = list(listeners)

    def add_listener(self, listener: PrintListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: PrintEvent, descriptor: PrintJobDescriptor) -> None:
        # A broken observer must not change the job outcome.
        for listener in self._listeners:
            try:
                listener(event, descriptor)
            except Exception:
                logger.exception("Print listener failed on %s event", event.value)

    def execute(self, document: fitz.Document, descriptor: PrintJobDescriptor) -> PrintJobResult:
        settings = self.settings.normalized(Path(document.name or "").name)
        self._emit(PrintEvent.STARTED, descriptor)
        try:
            result = self.driver.submit(document, descriptor, settings)
        except PrintExecutionError as exc:
            logger.error("Printing on %s failed: %s", descriptor.printer_name, exc)
            return PrintJobResult.failed("print", str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while printing on %s", descriptor.printer_name)
            return PrintJobResult.failed("print", f"An error occurred during printing: {exc}")
        self._emit(PrintEvent.FINISHED, descriptor)
        logger.info("%s via %s: %s", descriptor.printer_name, result.route, result.message)
        return result

    def print_file(self, path: str | Path, descriptor: PrintJobDescriptor) -> PrintJobResult:
        try:
            with open_document(path) as document:
                return self.execute(document, descriptor)
        except DocumentLoadError as exc:
            logger.error("Cannot load %s: %s", path, exc)
            return PrintJobResult.failed("load", str(exc))
