import shutil
from pathlib import Path
from typing import IO, Iterable, List, Optional
from uuid import uuid4

from fastapi import UploadFile

from deckmerge.core.config import get_settings


class LocalStorage:
    """Local disk storage for uploaded decks and merged, publicly served outputs."""

    def __init__(self, upload_dir: Optional[Path] = None, output_dir: Optional[Path] = None) -> None:
        settings = get_settings()
        self.extension = settings.document_extension
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.output_root = Path(output_dir or settings.output_dir)

        for directory in (self.upload_dir, self.output_root):
            directory.mkdir(parents=True, exist_ok=True)

    def _generate_filename(self) -> str:
        suffix = self.extension if self.extension.startswith(".") else f".{self.extension}"
        return f"{uuid4().hex}{suffix}"

    def save_upload(self, upload: UploadFile) -> Path:
        """Write an upload under a generated name that always carries the document extension."""
        upload.file.seek(0)
        path = self._save_stream(upload.file, directory=self.upload_dir)
        upload.file.seek(0)
        return path

    def _save_stream(self, stream: IO[bytes], *, directory: Path) -> Path:
        target_path = directory / self._generate_filename()
        with target_path.open("wb") as buffer:
            shutil.copyfileobj(stream, buffer)
        return target_path

    def output_path(self, output_name: str) -> Path:
        self.output_root.mkdir(parents=True, exist_ok=True)
        return self.output_root / output_name

    def list_outputs(self) -> List[Path]:
        return sorted(
            (path for path in self.output_root.glob(f"*{self.extension}") if path.is_file()),
            key=lambda path: path.stat().st_mtime,
        )

    def cleanup(self, paths: Iterable[Optional[Path]]) -> None:
        for path in paths:
            if path and path.exists():
                path.unlink(missing_ok=True)
