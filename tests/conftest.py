# tests/conftest.py
import os
import tempfile
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Point every directory at a scratch location before deckmerge reads its settings.
_SCRATCH = Path(tempfile.mkdtemp(prefix="deckmerge-tests-"))
os.environ.setdefault("PUBLIC_DIR", str(_SCRATCH / "public"))
os.environ.setdefault("UPLOAD_DIR", str(_SCRATCH / "uploads"))

from pptx import Presentation  # noqa: E402

PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def build_deck(path: Path, titles: List[str], notes: Optional[List[str]] = None) -> Path:
    prs = Presentation()
    for index, title in enumerate(titles):
        slide = prs.slides.add_slide(prs.slide_layouts[5])
        slide.shapes.title.text = title
        if notes and index < len(notes) and notes[index]:
            slide.notes_slide.notes_text_frame.text = notes[index]
    prs.save(str(path))
    return path


def slide_titles(path: Path) -> List[str]:
    return [slide.shapes.title.text for slide in Presentation(str(path)).slides]


@pytest.fixture
def make_deck(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, titles: List[str], notes: Optional[List[str]] = None) -> Path:
        return build_deck(tmp_path / name, titles, notes)

    return _make


@pytest.fixture
def make_container(tmp_path: Path) -> Callable[[str, List[str]], Path]:
    """Write a bare zip holding the given entry names, enough for the slide-part inspector."""

    def _make(name: str, entries: List[str]) -> Path:
        path = tmp_path / name
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for entry in entries:
                archive.writestr(entry, "<xml/>")
        path.write_bytes(buffer.getvalue())
        return path

    return _make
