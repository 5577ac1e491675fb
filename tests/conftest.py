import io
import shutil
import threading
import time

import pytest
from PIL import Image

requires_poppler = pytest.mark.skipif(shutil.which("pdftoppm") is None,
                                      reason="poppler (pdftoppm) not installed")

COLORS = [(200, 30, 30), (30, 200, 30), (30, 30, 200), (200, 200, 30)]


def make_pdf(sizes) -> bytes:
    """PDF with one solid-colour page per (width, height) in points."""
    pages = [Image.new("RGB", s, COLORS[i % len(COLORS)]) for i, s in enumerate(sizes)]
    buf = io.BytesIO()
    pages[0].save(buf, "PDF", save_all=True, append_images=pages[1:], resolution=72.0)
    return buf.getvalue()


class FakeRasterizer:
    """Stands in for poppler: paints the page number's colour at the viewport size."""

    def __init__(self, delays=None, fail_on=None):
        self.calls = []
        self.delays = delays or {}
        self.fail_on = fail_on
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, page, viewport):
        with self._lock:
            self.calls.append(page.number)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if page.number in self.delays:
                time.sleep(self.delays[page.number])
            if self.fail_on == page.number:
                from pdfjpg.errors import ConversionError
                raise ConversionError(f"Could not render page {page.number}: boom")
            return Image.new("RGB", viewport.pixel_size, COLORS[(page.number - 1) % len(COLORS)])
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def three_page_pdf():
    return make_pdf([(100, 150), (120, 80), (50, 50)])


@pytest.fixture
def fake_rasterizer():
    return FakeRasterizer()
