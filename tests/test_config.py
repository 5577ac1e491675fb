import pytest

from pdfjpg import config


def test_rendering_constants():
    assert config.RENDER_SCALE == 2.0
    assert config.JPEG_QUALITY == 100
    assert config.PDF_MIME_TYPE == "application/pdf"
    assert config.page_filename(7) == "page-7.jpg"


def test_workers_from_env(monkeypatch):
    monkeypatch.setenv("PDFJPG_WORKERS", "4")
    assert config.default_workers() == 4
    monkeypatch.setenv("PDFJPG_WORKERS", "0")
    assert config.default_workers() == 1
    monkeypatch.setenv("PDFJPG_WORKERS", "many")
    with pytest.raises(RuntimeError):
        config.default_workers()


def test_workers_default(monkeypatch):
    monkeypatch.delenv("PDFJPG_WORKERS", raising=False)
    assert config.default_workers() == 1


def test_poppler_path(monkeypatch, tmp_path):
    monkeypatch.setenv("POPPLER_PATH", str(tmp_path / "missing"))
    assert config.poppler_path() is None
    monkeypatch.setenv("POPPLER_PATH", str(tmp_path))
    assert config.poppler_path() == str(tmp_path)
