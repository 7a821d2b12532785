"""Installed printer lookup on top of a platform driver."""

from __future__ import annotations

import logging
from typing import List, Optional

from .base_driver import PrinterCapabilities, PrinterDriver
from .dispatcher import get_printer_driver

logger = logging.getLogger(__name__)


class PrinterDirectory:
    """Answers which printers exist and what they can do."""

    def __init__(self, driver: Optional[PrinterDriver] = None):
        self.driver = driver or get_printer_driver()

    def list_printers(self) -> List[str]:
        printers = self.driver.list_printers()
        logger.debug("%s reported %d printer(s)", self.driver.name, len(printers))
        return printers

    def exists(self, name: str) -> bool:
        return name in self.list_printers()

    def capabilities(self, printer_name: str) -> PrinterCapabilities:
        return self.driver.get_capabilities(printer_name)
