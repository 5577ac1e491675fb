from __future__ import annotations
import os
from pathlib import Path
import yaml
from dotenv import load_dotenv

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

load_dotenv()
CFG = yaml.safe_load(CONFIG_PATH.read_text(encoding="utf-8"))

RENDER_SCALE: float = float(CFG["render"]["scale"])
JPEG_QUALITY: int = int(CFG["render"]["jpeg_quality"])
RENDER_TIMEOUT: int = int(CFG["render"]["timeout"])
PDF_MIME_TYPE: str = CFG["upload"]["mime_type"]
FILENAME_PATTERN: str = CFG["output"]["filename_pattern"]


def poppler_path() -> str | None:
    """Folder holding pdftoppm, from the env var named in config (None = use PATH)."""
    p = os.getenv(CFG["poppler"]["path_env"])
    if p and Path(p).exists():
        return p
    return None


def default_workers() -> int:
    raw = os.getenv(CFG["poppler"]["workers_env"])
    if raw:
        try:
            return max(1, int(raw))
        except ValueError:
            raise RuntimeError(f"{CFG['poppler']['workers_env']} must be an integer, got {raw!r}")
    return max(1, int(CFG["render"]["workers"]))


def page_filename(page_number: int) -> str:
    return FILENAME_PATTERN.format(page=page_number)
