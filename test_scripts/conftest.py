import os
from pathlib import Path

import fitz
import pytest

# Headless-friendly Qt backend for CI/terminal runs.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from pdf_printer import PaperSource, PrinterCapabilities
from pdf_printer.platforms import MemoryPrinterDriver


def _build_sample_pdf(path: Path, pages: int = 3) -> Path:
    doc = fitz.open()
    try:
        for idx in range(pages):
            page = doc.new_page(width=595, height=842)  # A4 @ 72dpi
            page.insert_text((72, 80), f"Print test page {idx + 1}", fontsize=18, fontname="helv")
        doc.save(path)
    finally:
        doc.close()
    return path


@pytest.fixture
def sample_pdf(tmp_path) -> Path:
    return _build_sample_pdf(tmp_path / "a.pdf")


@pytest.fixture
def office_caps() -> PrinterCapabilities:
    return PrinterCapabilities(
        supports_color=True,
        supports_duplex=True,
        paper_sizes=frozenset({"A4", "Letter"}),
        paper_sources=(
            PaperSource(name="Automatically Select", token="bin:7"),
            PaperSource(name=" Tray 1 ", token="bin:2"),
            PaperSource(name="Manual Feed", token="bin:4"),
        ),
    )


@pytest.fixture
def mono_caps() -> PrinterCapabilities:
    return PrinterCapabilities(
        supports_color=False,
        supports_duplex=False,
        paper_sizes=frozenset({"A4"}),
        paper_sources=(PaperSource(name="Auto", token="InputSlot=Auto"),),
    )


@pytest.fixture
def driver(office_caps, mono_caps) -> MemoryPrinterDriver:
    return MemoryPrinterDriver({"Office-LJ": office_caps, "Basement Mono": mono_caps})
