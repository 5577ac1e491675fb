from __future__ import annotations
import logging
from typing import Optional

from PIL import Image
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
    PopplerNotInstalledError,
)

from .config import RENDER_TIMEOUT, poppler_path
from .decoder import PdfPage, Viewport
from .errors import ConversionError

logger = logging.getLogger(__name__)

POPPLER_ERRORS = (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
    PopplerNotInstalledError,
)


class PopplerRasterizer:
    """
    Renders one page onto a fresh RGB surface sized to the viewport.
    Each call runs its own pdftoppm process on the document's spooled copy,
    so calls may overlap.
    """

    def __init__(self, poppler_dir: Optional[str] = None, timeout: Optional[int] = None):
        self.poppler_dir = poppler_dir if poppler_dir is not None else poppler_path()
        self.timeout = timeout or RENDER_TIMEOUT

    def __call__(self, page: PdfPage, viewport: Viewport) -> Image.Image:
        size = viewport.pixel_size
        try:
            images = convert_from_path(
                page.document.path,
                dpi=viewport.dpi,
                first_page=page.number,
                last_page=page.number,
                size=size,
                use_cropbox=True,
                poppler_path=self.poppler_dir,
                timeout=self.timeout,
            )
        except POPPLER_ERRORS as e:
            raise ConversionError(f"Could not render page {page.number}: {e}") from e
        if len(images) != 1:
            raise ConversionError(f"Could not render page {page.number}: renderer returned {len(images)} images")

        surface = images[0].convert("RGB")
        if surface.size != size:
            # pdftoppm rounds scale-to sizes on some builds
            logger.debug("page %d rendered at %s, resizing to %s", page.number, surface.size, size)
            surface = surface.resize(size, Image.LANCZOS)
        return surface
