"""Shared pytest configuration, markers and image fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


_PIL_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
}


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """Write a small real image whose encoder follows the file extension."""

    def _make(
        path: Path,
        size: tuple[int, int] = (16, 12),
        color: tuple[int, ...] = (200, 30, 30),
        mode: str = "RGB",
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        im = Image.new(mode, size, color)
        fmt = _PIL_FORMATS[path.suffix.lower()]
        if fmt == "JPEG" and im.mode != "RGB":
            im = im.convert("RGB")
        im.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def source_tree(tmp_path: Path, make_image: Callable[..., Path]) -> Path:
    """
    src/
      top.png
      a/one.jpg
      a/b/two.gif
      notes.txt
      empty/
    """
    src = tmp_path / "src"
    make_image(src / "top.png")
    make_image(src / "a" / "one.jpg")
    make_image(src / "a" / "b" / "two.gif")
    (src / "notes.txt").write_text("hello", encoding="utf-8")
    (src / "empty").mkdir()
    return src
