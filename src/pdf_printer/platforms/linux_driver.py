"""Linux CUPS/lp print driver implementation."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from typing import Dict, List, Optional, Tuple

import fitz

from ..base_driver import (
    DispatchSettings,
    DuplexMode,
    PaperSource,
    PrinterCapabilities,
    PrinterDriver,
    PrintJobDescriptor,
    PrintJobResult,
    TriState,
)
from ..errors import DirectoryUnavailableError, PrintExecutionError
from ..qt_bridge import qt_capabilities, qt_printer_names, raster_print

try:
    import cups  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cups = None

logger = logging.getLogger(__name__)

_SIDES = {
    DuplexMode.SIMPLEX: "one-sided",
    DuplexMode.LONG_EDGE: "two-sided-long-edge",
    DuplexMode.SHORT_EDGE: "two-sided-short-edge",
}
_MONOCHROME_MODELS = ("gray", "grey", "mono", "black")
_LP_REQUEST_ID = re.compile(r"request id is (\S+)")


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def parse_lpoptions(output: str) -> Dict[str, List[str]]:
    """
    Parse `lpoptions -l` output into {option keyword: [choices]}.

    sample: "InputSlot/Media Source: *Auto Tray1 Manual"
    """
    options: Dict[str, List[str]] = {}
    for line in output.splitlines():
        head, sep, tail = line.partition(":")
        if not sep:
            continue
        keyword = head.split("/", 1)[0].strip()
        if keyword:
            options[keyword] = [choice.lstrip("*") for choice in tail.split()]
    return options


class LinuxPrinterDriver(PrinterDriver):
    """Linux driver with CUPS direct path, lp fallback and Qt raster route."""

    @property
    def name(self) -> str:
        return "linux_cups"

    def _cups_connection(self):
        if cups is None:
            return None
        try:
            return cups.Connection()
        except Exception as exc:
            logger.debug("CUPS connection unavailable: %s", exc)
            return None

    def list_printers(self) -> List[str]:
        conn = self._cups_connection()
        if conn is not None:
            try:
                return list(conn.getPrinters().keys())
            except Exception as exc:
                raise DirectoryUnavailableError(f"Cannot list CUPS printers: {exc}") from exc

        if shutil.which("lpstat"):
            return self._list_via_lpstat()

        # Last fallback: Qt printer info.
        return qt_printer_names()

    @staticmethod
    def _list_via_lpstat() -> List[str]:
        proc = subprocess.run(["lpstat", "-e"], capture_output=True, text=True)
        if proc.returncode != 0:
            err = ((proc.stderr or "") + (proc.stdout or "")).strip()
            if "no destinations" in err.lower():
                return []
            raise DirectoryUnavailableError(f"lpstat failed (rc={proc.returncode}): {err}")
        return [line.strip() for line in proc.stdout.splitlines() if line.strip()]

    def get_capabilities(self, printer_name: str) -> PrinterCapabilities:
        conn = self._cups_connection()
        if conn is not None:
            try:
                return self._capabilities_via_cups(conn, printer_name)
            except Exception as exc:
                raise DirectoryUnavailableError(
                    f"Cannot query printer '{printer_name}': {exc}"
                ) from exc

        if shutil.which("lpoptions"):
            return self._capabilities_via_lpoptions(printer_name)

        return qt_capabilities(printer_name)

    @staticmethod
    def _ppd_input_slots(conn, printer_name: str) -> Tuple[PaperSource, ...]:
        try:
            ppd_path = conn.getPPD(printer_name)
        except cups.IPPError:
            # driverless queues have no PPD
            return ()
        try:
            option = cups.PPD(ppd_path).findOption("InputSlot")
        finally:
            os.unlink(ppd_path)
        if option is None:
            return ()
        return tuple(
            PaperSource(name=choice["text"], token=f"InputSlot={choice['choice']}")
            for choice in option.choices
        )

    def _capabilities_via_cups(self, conn, printer_name: str) -> PrinterCapabilities:
        attrs = conn.getPrinterAttributes(
            printer_name,
            requested_attributes=[
                "color-supported",
                "sides-supported",
                "media-supported",
                "media-source-supported",
            ],
        )
        sources = self._ppd_input_slots(conn, printer_name)
        if not sources:
            sources = tuple(
                PaperSource(name=value, token=f"media-source={value}")
                for value in _as_list(attrs.get("media-source-supported"))
            )
        return PrinterCapabilities(
            supports_color=bool(attrs.get("color-supported", False)),
            supports_duplex=any(
                side.startswith("two-sided")
                for side in _as_list(attrs.get("sides-supported"))
            ),
            paper_sizes=frozenset(_as_list(attrs.get("media-supported"))),
            paper_sources=sources,
        )

    @staticmethod
    def _capabilities_via_lpoptions(printer_name: str) -> PrinterCapabilities:
        proc = subprocess.run(
            ["lpoptions", "-p", printer_name, "-l"],
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0:
            err = ((proc.stderr or "") + (proc.stdout or "")).strip()
            raise DirectoryUnavailableError(
                f"lpoptions failed for '{printer_name}' (rc={proc.returncode}): {err}"
            )
        options = parse_lpoptions(proc.stdout)
        color_models = options.get("ColorModel", [])
        return PrinterCapabilities(
            supports_color=any(
                not any(word in model.lower() for word in _MONOCHROME_MODELS)
                for model in color_models
            ),
            supports_duplex=any(
                choice.lower() != "none" for choice in options.get("Duplex", [])
            ),
            paper_sizes=frozenset(options.get("PageSize", [])),
            paper_sources=tuple(
                PaperSource(name=choice, token=f"InputSlot={choice}")
                for choice in options.get("InputSlot", [])
            ),
        )

    @staticmethod
    def _to_cups_options(descriptor: PrintJobDescriptor) -> Dict[str, str]:
        cups_options: Dict[str, str] = {"copies": str(descriptor.copies)}
        if descriptor.collate.is_set:
            cups_options["collate"] = "true" if descriptor.collate is TriState.ON else "false"
        if descriptor.color.is_set:
            cups_options["print-color-mode"] = (
                "color" if descriptor.color is TriState.ON else "monochrome"
            )
        if descriptor.duplex is not None:
            cups_options["sides"] = _SIDES[descriptor.duplex]
        if descriptor.page_size is not None:
            width_in, height_in = descriptor.page_size.inches
            cups_options["media"] = f"Custom.{width_in:g}x{height_in:g}in"
        if descriptor.zero_margins:
            for side in ("left", "right", "top", "bottom"):
                cups_options[f"page-{side}"] = "0"
        if descriptor.paper_source is not None:
            key, sep, value = descriptor.paper_source.token.partition("=")
            if sep:
                cups_options[key] = value
        return cups_options

    def _submit_via_cups(
        self,
        conn,
        pdf_path: str,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        try:
            job_id = conn.printFile(
                descriptor.printer_name,
                pdf_path,
                settings.job_name,
                self._to_cups_options(descriptor),
            )
        except Exception as exc:
            raise PrintExecutionError(f"CUPS rejected the job: {exc}") from exc
        return PrintJobResult(
            success=True,
            route="cups-direct",
            message=f"Submitted print job to CUPS printer '{descriptor.printer_name}'.",
            job_id=str(job_id),
        )

    def _submit_via_lp(
        self,
        pdf_path: str,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        cmd = ["lp", "-d", descriptor.printer_name, "-t", settings.job_name]
        for key, value in self._to_cups_options(descriptor).items():
            if key == "copies":
                cmd.extend(["-n", value])
            else:
                cmd.extend(["-o", f"{key}={value}"])
        cmd.append(pdf_path)

        proc = subprocess.run(cmd, capture_output=True, text=True)
        if proc.returncode != 0:
            out = (proc.stdout or "") + (proc.stderr or "")
            raise PrintExecutionError(f"lp failed (rc={proc.returncode}): {out.strip()}")
        out = (proc.stdout or "").strip()
        match = _LP_REQUEST_ID.search(out)
        return PrintJobResult(
            success=True,
            route="lp-direct",
            message=out or "Submitted print job via lp.",
            job_id=match.group(1) if match else None,
        )

    @staticmethod
    def _document_path(document: fitz.Document) -> Optional[str]:
        path = getattr(document, "name", "") or ""
        return path if path and os.path.isfile(path) else None

    def submit(
        self,
        document: fitz.Document,
        descriptor: PrintJobDescriptor,
        settings: DispatchSettings,
    ) -> PrintJobResult:
        pdf_path = self._document_path(document)
        if settings.transport != "raster" and pdf_path is not None:
            conn = self._cups_connection()
            if conn is not None:
                logger.debug("Submitting %s through CUPS", pdf_path)
                return self._submit_via_cups(conn, pdf_path, descriptor, settings)
            if shutil.which("lp") is not None:
                logger.debug("Submitting %s through lp", pdf_path)
                return self._submit_via_lp(pdf_path, descriptor, settings)

        if settings.transport == "direct":
            raise PrintExecutionError("Direct printing is not available on this system.")

        logger.debug("Submitting through Qt raster route")
        return raster_print(document, descriptor, settings)
