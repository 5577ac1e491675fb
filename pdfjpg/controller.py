"""
State owned by the upload page.

    IDLE --submit--> LOADING --complete--> READY
                        |
                        +------fail------> ERROR --reset--> IDLE

Transitions only touch the fields set in __init__ and then notify
subscribers. Results from a run whose token is no longer the
current generation are dropped.
"""
from __future__ import annotations
import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from .config import PDF_MIME_TYPE, default_workers
from .errors import ConversionCancelled, ConversionError, ConversionInProgressError, InvalidUploadError
from .pipeline import RenderedImage, convert_pdf

logger = logging.getLogger(__name__)

Listener = Callable[["ConversionController"], None]


class ShellState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class UploadedFile:
    name: str
    mime_type: Optional[str]
    data: bytes

    @classmethod
    def from_path(cls, path) -> "UploadedFile":
        p = Path(path)
        mime, _ = mimetypes.guess_type(p.name)
        return cls(p.name, mime, p.read_bytes())

    @classmethod
    def from_streamlit(cls, f) -> "UploadedFile":
        return cls(f.name, f.type, f.getvalue())


class ConversionController:
    def __init__(self):
        self.state = ShellState.IDLE
        self.images: List[RenderedImage] = []
        self.error: Optional[str] = None
        self.dragging = False
        self.generation = 0
        self._listeners: List[Listener] = []

    @property
    def loading(self) -> bool:
        return self.state is ShellState.LOADING

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        for fn in list(self._listeners):
            fn(self)

    def is_current(self, token: int) -> bool:
        return self.loading and token == self.generation

    # drag highlight is purely visual
    def drag_enter(self):
        if not self.dragging:
            self.dragging = True
            self._notify()

    def drag_leave(self):
        if self.dragging:
            self.dragging = False
            self._notify()

    def submit(self, upload: Optional[UploadedFile]) -> Optional[int]:
        """
        Accept a file and enter LOADING. Returns the run token.

        None is a no-op. A non-PDF raises InvalidUploadError and a submit
        while a run is active raises ConversionInProgressError; neither
        changes state.
        """
        self.dragging = False
        if upload is None:
            return None
        if upload.mime_type != PDF_MIME_TYPE:
            logger.info("rejected upload %r with type %r", upload.name, upload.mime_type)
            raise InvalidUploadError()
        if self.loading:
            raise ConversionInProgressError()
        self.generation += 1
        self.state = ShellState.LOADING
        self.images = []
        self.error = None
        self._notify()
        return self.generation

    def complete(self, token: int, images: List[RenderedImage]) -> bool:
        if not self.is_current(token):
            logger.warning("dropping stale result for run %d (current %d)", token, self.generation)
            return False
        self.images = list(images)
        self.state = ShellState.READY
        self._notify()
        return True

    def fail(self, token: int, message: str) -> bool:
        if not self.is_current(token):
            logger.warning("dropping stale failure for run %d (current %d)", token, self.generation)
            return False
        self.images = []
        self.error = message
        self.state = ShellState.ERROR
        self._notify()
        return True

    def reset(self):
        if self.loading:
            raise ConversionInProgressError()
        self.state = ShellState.IDLE
        self.images = []
        self.error = None
        self._notify()

    def abandon(self):
        """Drop the active run, if any, and go back to IDLE. Its results will be ignored."""
        if not self.loading:
            return
        logger.info("abandoning run %d", self.generation)
        self.generation += 1
        self.state = ShellState.IDLE
        self.images = []
        self._notify()

    def run(self, upload: Optional[UploadedFile], convert=convert_pdf, **kwargs) -> ShellState:
        """Submit, convert and settle in one call. Conversion errors end in ERROR."""
        token = self.submit(upload)
        if token is None:
            return self.state
        kwargs.setdefault("workers", default_workers())
        try:
            images = convert(upload.data, cancelled=lambda: not self.is_current(token), **kwargs)
        except ConversionCancelled:
            logger.info("run %d cancelled", token)
            return self.state
        except ConversionError as e:
            logger.warning("conversion of %r failed: %s", upload.name, e)
            self.fail(token, str(e))
            return self.state
        except Exception as e:
            logger.exception("unexpected error converting %r", upload.name)
            self.fail(token, f"Conversion failed: {e}")
            return self.state
        except BaseException:
            # script interrupted mid run (e.g. a Streamlit rerun)
            if self.is_current(token):
                self.abandon()
            raise
        self.complete(token, images)
        return self.state
