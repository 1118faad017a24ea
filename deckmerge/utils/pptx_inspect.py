import re
import zipfile
from pathlib import Path
from typing import List

from deckmerge.core.errors import InvalidDeckError

SLIDE_PART_PREFIX = "ppt/slides/slide"
SLIDE_PART_SUFFIX = ".xml"
SLIDE_PART_PATTERN = re.compile(r"^ppt/slides/slide(\d+)\.xml$")


def _entry_names(pptx_path: Path) -> List[str]:
    try:
        with zipfile.ZipFile(pptx_path) as archive:
            return archive.namelist()
    except (zipfile.BadZipFile, OSError) as exc:
        raise InvalidDeckError(f"Cannot read presentation container: {Path(pptx_path).name}") from exc


def count_slide_parts(pptx_path: Path) -> int:
    """Count the ``ppt/slides/slide*.xml`` entries inside a presentation container."""
    return sum(
        1
        for name in _entry_names(pptx_path)
        if name.startswith(SLIDE_PART_PREFIX) and name.endswith(SLIDE_PART_SUFFIX)
    )


def slide_part_numbers(pptx_path: Path) -> List[int]:
    """
    Return the numeric indices of the slide parts found in the container, ascending.

    Unlike :func:`count_slide_parts` this keeps gaps in the numbering, e.g. a deck
    whose second slide was deleted yields ``[1, 3]``.
    """
    numbers = []
    for name in _entry_names(pptx_path):
        match = SLIDE_PART_PATTERN.match(name)
        if match:
            numbers.append(int(match.group(1)))
    return sorted(numbers)
