"""In-memory print driver for tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import fitz

from ..base_driver import (
    DispatchSettings,
    PrinterCapabilities,
    PrinterDriver,
    PrintJobDescriptor,
    PrintJobResult,
)
from ..errors import DirectoryUnavailableError


@dataclass(slots=True)
class SubmittedJob:
    document_name: str
    page_count: int
    descriptor: PrintJobDescriptor
    settings: DispatchSettings


class MemoryPrinterDriver(PrinterDriver):
    """Keeps printers in a dict and records submitted jobs instead of printing."""

    def __init__(
        self,
        printers: Optional[Dict[str, PrinterCapabilities]] = None,
        available: bool = True,
        submit_error: Optional[Exception] = None,
    ):
        self.printers = dict(printers or {})
        self.available = available
        self.submit_error = submit_error
        self.jobs: List[SubmittedJob] = []

    @property
    def name(self) -> str:
        return "memory"

    def list_printers(self) -> List[str]:
        if not self.available:
            raise DirectoryUnavailableError("Printer registry is not reachable.")
        return list(self.printers)

    def get_capabilities(self, printer_name: str) -> PrinterCapabilities:
        if not self.available:
            raise DirectoryUnavailableError("Printer registry is not reachable.")
        try:
            return self.printers[printer_name]
        except KeyError as exc:
            raise DirectoryUnavailableError(f"Unknown printer '{printer_name}'.") from exc

    def submit(
        self,
        document: fitz.Document,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        if self.submit_error is not None:
            raise self.submit_error
        self.jobs.append(
            SubmittedJob(
                document_name=document.name,
                page_count=document.page_count,
                descriptor=descriptor,
                settings=settings,
            )
        )
        return PrintJobResult(
            success=True,
            route="memory",
            message=f"Recorded {document.page_count} page(s) for '{descriptor.printer_name}'.",
            job_id=str(len(self.jobs)),
        )
