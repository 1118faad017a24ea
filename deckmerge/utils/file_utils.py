import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

OUTPUT_PREFIX = "merged_"

T = TypeVar("T")


def has_document_extension(filename: Optional[str], extension: str = ".pptx") -> bool:
    """Case-sensitive suffix check, the same test the browser page applies before upload."""
    return bool(filename) and filename.endswith(extension)


def filter_documents(
    items: Iterable[T], extension: str = ".pptx", name: Callable[[T], str] = str
) -> List[T]:
    """Keep the items whose name carries the document extension, in their original order."""
    return [item for item in items if has_document_extension(name(item), extension)]


def build_output_name(timestamp_ms: Optional[int] = None, extension: str = ".pptx") -> str:
    """
    Return ``merged_<millisecond timestamp><extension>``.

    Two jobs started in the same millisecond get the same name; nothing here
    guards against that.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{OUTPUT_PREFIX}{timestamp_ms}{extension}"


def file_stats(path: Path) -> Tuple[int, float]:
    """Return the size in bytes and the modification time of a file, or zeros if it is gone."""
    if not path.exists():
        return 0, 0.0
    stat = path.stat()
    return stat.st_size, stat.st_mtime
