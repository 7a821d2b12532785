"""PyMuPDF document loading and page rasterisation for the print pipeline."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import fitz
from PySide6.QtGui import QImage

from .errors import DocumentLoadError, PrintExecutionError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenderedPage:
    """Rendered page payload for print bridge."""

    page_index: int
    page_rect: fitz.Rect
    image: QImage


@contextmanager
def open_document(path: str | Path) -> Iterator[fitz.Document]:
    """
    Open `path` with PyMuPDF and close it again on every exit path.

    Raises DocumentLoadError for missing, unreadable or empty documents.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise DocumentLoadError(f"The file could not be found: {file_path}")
    try:
        doc = fitz.open(str(file_path))
    except Exception as exc:
        raise DocumentLoadError(
            f"An error occurred while loading the document: {exc}"
        ) from exc
    try:
        if doc.needs_pass:
            raise DocumentLoadError(f"Document is password protected: {file_path}")
        if doc.page_count == 0:
            raise DocumentLoadError(f"Document has no pages: {file_path}")
        logger.debug("Opened %s (%d pages)", file_path, doc.page_count)
        yield doc
    finally:
        doc.close()


def _pixmap_to_qimage(pix: fitz.Pixmap) -> QImage:
    fmt = QImage.Format_RGBA8888 if pix.alpha else QImage.Format_RGB888
    # .copy() detaches from fitz memory to keep QImage valid after pixmap is freed.
    return QImage(pix.samples, pix.width, pix.height, pix.stride, fmt).copy()


def iter_page_images(doc: fitz.Document, dpi: int) -> Iterator[RenderedPage]:
    """Stream page images in document order, one page in memory at a time."""
    zoom = float(dpi) / 72.0
    matrix = fitz.Matrix(zoom, zoom)
    for page_index in range(doc.page_count):
        try:
            page = doc[page_index]
            pix = page.get_pixmap(matrix=matrix, colorspace=fitz.csRGB, alpha=False)
        except Exception as exc:
            raise PrintExecutionError(
                f"Failed to render page {page_index + 1}: {exc}"
            ) from exc
        yield RenderedPage(
            page_index=page_index,
            page_rect=fitz.Rect(page.rect),
            image=_pixmap_to_qimage(pix),
        )
