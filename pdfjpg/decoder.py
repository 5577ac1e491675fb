"""
Document decoder: raw PDF bytes -> document / page handles.

pypdf only reads the document structure here (page count, page boxes,
rotation). Pixels come from the rasterizer.
"""
from __future__ import annotations
import io
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from typing import Tuple

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .errors import ConversionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewport:
    """Pixel-space rectangle of one page at a given scale (1.0 = 72 dpi)."""
    width: float
    height: float
    scale: float

    @property
    def pixel_size(self) -> Tuple[int, int]:
        # fractional sizes truncate, as when sizing a canvas
        return max(1, int(self.width)), max(1, int(self.height))

    @property
    def dpi(self) -> float:
        return 72.0 * self.scale


class PdfPage:
    def __init__(self, document: "PdfDocument", number: int, width: float, height: float):
        self.document = document
        self.number = number
        self.width = width
        self.height = height

    def viewport(self, scale: float) -> Viewport:
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        return Viewport(self.width * scale, self.height * scale, scale)

    def __repr__(self):
        return f"PdfPage(number={self.number}, width={self.width}, height={self.height})"


class PdfDocument:
    """Handle over one in-memory PDF. Pages are numbered from 1."""

    def __init__(self, data: bytes):
        self.data = data
        self._path = None
        self._path_lock = threading.Lock()
        self._stream = io.BytesIO(data)
        try:
            self._reader = PdfReader(self._stream)
            locked = self._reader.is_encrypted and not self._reader.decrypt("")
            self.page_count = 0 if locked else len(self._reader.pages)
        except (PyPdfError, ValueError) as e:
            self._stream.close()
            raise ConversionError(f"Could not read PDF: {e}") from e
        if locked:
            self._stream.close()
            raise ConversionError("This PDF is password protected")
        logger.debug("opened PDF with %d pages (%d bytes)", self.page_count, len(data))

    def page(self, number: int) -> PdfPage:
        if not 1 <= number <= self.page_count:
            raise IndexError(f"page {number} out of range 1..{self.page_count}")
        try:
            p = self._reader.pages[number - 1]
            box = p.cropbox
            w, h = float(box.width), float(box.height)
            if p.rotation % 180 == 90:
                w, h = h, w
        except (PyPdfError, ValueError, KeyError) as e:
            raise ConversionError(f"Could not read page {number}: {e}") from e
        return PdfPage(self, number, abs(w), abs(h))

    def pages(self):
        for i in range(1, self.page_count + 1):
            yield self.page(i)

    @property
    def path(self) -> str:
        """The document spooled to a temp file once, for renderers that read from disk."""
        with self._path_lock:
            if self._path is None:
                fd, self._path = tempfile.mkstemp(suffix=".pdf", prefix="pdfjpg_")
                with os.fdopen(fd, "wb") as f:
                    f.write(self.data)
            return self._path

    def close(self):
        self._stream.close()
        with self._path_lock:
            if self._path is not None:
                try:
                    os.remove(self._path)
                except FileNotFoundError:
                    pass
                self._path = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def open_document(data: bytes) -> PdfDocument:
    if not data:
        raise ConversionError("Could not read PDF: file is empty")
    return PdfDocument(data)
