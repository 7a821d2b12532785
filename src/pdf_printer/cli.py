"""Command-line entrypoint: print one document on one printer."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .base_driver import DispatchSettings, PrinterDriver, PrintOptions, TriState
from .directory import PrinterDirectory
from .dispatcher import JobDispatcher, PrintEvent
from .errors import (
    DirectoryUnavailableError,
    NoPrinterSelectedError,
    ResolutionError,
    TrayNotFoundError,
)
from .resolver import SettingsResolver

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _parse_flag(value: str) -> bool:
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-printer",
        description="Print a document on an installed printer.",
    )
    parser.add_argument("-p", "--printerName", "--printer-name", dest="printer_name",
                        required=True, help="Name of the printer to print the document to.")
    parser.add_argument("-f", "--fileName", "--file-name", dest="file_name",
                        required=True, help="File path of the document to print.")
    parser.add_argument("-s", "--pageSize", "--page-size", dest="page_size",
                        help="Paper size to print to, '<width>x<height>' in millimetres.")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="Wait for Enter before exiting after an error.")
    parser.add_argument("-t", "--tray", help="Paper source to print from.")
    parser.add_argument("-c", "--colour", "--color", dest="colour", type=_parse_flag,
                        nargs="?", const=True, default=None, metavar="true|false",
                        help="Whether or not to print in colour.")
    parser.add_argument("-n", "--copies", type=int, default=1,
                        help="Number of copies to print.")
    parser.add_argument("-x", "--collate", type=_parse_flag, nargs="?", const=True,
                        default=None, metavar="true|false",
                        help="Whether or not to collate copies.")
    parser.add_argument("-d", "--duplex", default="single",
                        help="Double sided printing: single, portrait or landscape.")
    parser.add_argument("--dpi", type=int, default=300,
                        help="Raster resolution when pages are rendered locally.")
    parser.add_argument("--job-name", dest="job_name", help="Spooler job title.")
    parser.add_argument("--transport", choices=["auto", "direct", "raster"], default="auto",
                        help="Submit the file directly to the spooler or render it first.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def options_from_args(args: argparse.Namespace) -> PrintOptions:
    return PrintOptions(
        file_path=args.file_name,
        printer_name=args.printer_name,
        page_size=args.page_size,
        copies=args.copies,
        collate=TriState.from_flag(args.collate),
        color=TriState.from_flag(args.colour),
        duplex=args.duplex,
        tray=args.tray,
        interactive=args.interactive,
    )


def _print_list(title: str, items: List[str]) -> None:
    print(title)
    for item in items:
        print(item)


def _pause(interactive: bool) -> None:
    if interactive:
        print("Press Enter to quit")
        try:
            input()
        except EOFError:
            pass


def _report_event(event: PrintEvent, _descriptor) -> None:
    if event is PrintEvent.STARTED:
        print("Starting printing...")
    else:
        print("Finished printing")


def main(argv: Optional[List[str]] = None, driver: Optional[PrinterDriver] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse already printed usage/help
        if exc.code in (0, None):
            return EXIT_OK
        print("Error: Script arguments are invalid.")
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if sys.platform.startswith("linux") and not (
        os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")
    ):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    options = options_from_args(args)
    directory = PrinterDirectory(driver)
    try:
        printers = directory.list_printers()
        resolution = SettingsResolver(directory).resolve(options, printers)
    except NoPrinterSelectedError as exc:
        print(exc)
        _print_list("Available printers are:", exc.printers)
        _pause(options.interactive)
        return EXIT_FAILED
    except TrayNotFoundError as exc:
        print(exc)
        _print_list("Available paper sources:", exc.trays)
        _pause(options.interactive)
        return EXIT_FAILED
    except (ResolutionError, DirectoryUnavailableError) as exc:
        print(f"Error: {exc}")
        _pause(options.interactive)
        return EXIT_FAILED

    descriptor = resolution.descriptor
    if descriptor.page_size is not None:
        print(f"Printing at {descriptor.page_size.width} x {descriptor.page_size.height}")
    if descriptor.copies > 1:
        print(f"Printing {descriptor.copies} copies")
    for warning in resolution.warnings:
        print(f"Warning: {warning}")

    dispatcher = JobDispatcher(
        directory.driver,
        DispatchSettings(dpi=args.dpi, job_name=args.job_name, transport=args.transport),
        listeners=[_report_event],
    )
    print(f"Printing on {descriptor.printer_name}...")
    result = dispatcher.print_file(Path(options.file_path), descriptor)
    if not result.success:
        print("Failed")
        if result.stage == "load":
            print(f"Could not load the document: {result.message}")
        else:
            print(f"An error occurred during printing: {result.message}")
        return EXIT_FAILED

    print("Done")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
