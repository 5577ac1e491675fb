"""
PDF bytes -> one JPEG data URI per page.

Pages are opened, rasterized and encoded in page order. With workers > 1 a
bounded thread pool renders several pages at once and the results are put
back into page order before returning.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from PIL import Image

from .config import JPEG_QUALITY, RENDER_SCALE, page_filename
from .decoder import PdfDocument, PdfPage, Viewport, open_document
from .encoder import encode_data_uri, from_data_uri
from .errors import ConversionCancelled
from .rasterizer import PopplerRasterizer

logger = logging.getLogger(__name__)

Rasterizer = Callable[[PdfPage, Viewport], Image.Image]


@dataclass(frozen=True)
class RenderedImage:
    page_number: int
    data_uri: str
    width: int
    height: int

    @property
    def filename(self) -> str:
        return page_filename(self.page_number)

    @property
    def jpeg_bytes(self) -> bytes:
        return from_data_uri(self.data_uri)


def render_and_encode(page: PdfPage, scale: float, quality: int, rasterizer: Rasterizer) -> RenderedImage:
    viewport = page.viewport(scale)
    surface = rasterizer(page, viewport)
    try:
        uri = encode_data_uri(surface, quality)
        w, h = surface.size
    finally:
        surface.close()
    logger.debug("page %d -> %dx%d jpeg", page.number, w, h)
    return RenderedImage(page.number, uri, w, h)


def _check(cancelled: Optional[Callable[[], bool]], page_number: int):
    if cancelled is not None and cancelled():
        raise ConversionCancelled(f"conversion cancelled before page {page_number}")


def _convert_sequential(doc: PdfDocument, scale, quality, rasterizer, cancelled, on_page) -> List[RenderedImage]:
    out: List[RenderedImage] = []
    for n in range(1, doc.page_count + 1):
        _check(cancelled, n)
        out.append(render_and_encode(doc.page(n), scale, quality, rasterizer))
        if on_page:
            on_page(n, doc.page_count)
    return out


def _convert_parallel(doc: PdfDocument, scale, quality, rasterizer, cancelled, on_page, workers) -> List[RenderedImage]:
    # pypdf readers are not thread safe, resolve page handles up front
    pages = list(doc.pages())
    results: List[Optional[RenderedImage]] = [None] * doc.page_count

    def job(n: int) -> int:
        _check(cancelled, n)
        results[n - 1] = render_and_encode(pages[n - 1], scale, quality, rasterizer)
        return n

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(job, n) for n in range(1, doc.page_count + 1)]
        try:
            for fut in futures:
                n = fut.result()
                if on_page:
                    on_page(n, doc.page_count)
        except BaseException:
            for f in futures:
                f.cancel()
            raise
    return [r for r in results if r is not None]


def convert_pdf(
    data: bytes,
    scale: float = RENDER_SCALE,
    quality: int = JPEG_QUALITY,
    workers: int = 1,
    cancelled: Optional[Callable[[], bool]] = None,
    on_page: Optional[Callable[[int, int], None]] = None,
    rasterizer: Optional[Rasterizer] = None,
) -> List[RenderedImage]:
    """
    Convert every page of `data` to a JPEG data URI.

    Returns one RenderedImage per page, ordered 1..N. Decode and render
    failures surface as ConversionError; `cancelled` returning True between
    pages raises ConversionCancelled.
    """
    rasterizer = rasterizer or PopplerRasterizer()
    workers = max(1, int(workers))
    with open_document(data) as doc:
        logger.info("converting %d pages at scale %.2f (workers=%d)", doc.page_count, scale, workers)
        if workers == 1 or doc.page_count <= 1:
            images = _convert_sequential(doc, scale, quality, rasterizer, cancelled, on_page)
        else:
            images = _convert_parallel(doc, scale, quality, rasterizer, cancelled, on_page,
                                       min(workers, doc.page_count))
    return images


def convert_file(pdf_path, out_dir, **kwargs) -> List[Path]:
    """Convert a PDF on disk and write page-<N>.jpg files into out_dir."""
    pdf_path = Path(pdf_path)
    out = Path(out_dir); out.mkdir(parents=True, exist_ok=True)
    images = convert_pdf(pdf_path.read_bytes(), **kwargs)
    paths = []
    for img in images:
        fp = out / img.filename
        fp.write_bytes(img.jpeg_bytes)
        paths.append(fp)
    return paths
