from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union
from urllib.parse import urljoin

import requests

from deckmerge.core.errors import MergeRequestError, UploadRejectedError
from deckmerge.utils.file_utils import filter_documents

PPTX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


@dataclass
class CandidateFile:
    """A file picked by the user: a name plus either a local path or in-memory content."""

    name: str
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CandidateFile":
        path = Path(path)
        return cls(name=path.name, path=path)

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"No content or path for {self.name}")
        return self.path.read_bytes()


@dataclass
class MergeResult:
    download_url: str
    absolute_url: str


class UploadSet:
    """Ordered list of files waiting to be merged; append and remove-by-index only."""

    def __init__(self) -> None:
        self._items: List[CandidateFile] = []
        self._frozen = False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CandidateFile]:
        return iter(self._items)

    def __getitem__(self, index: int) -> CandidateFile:
        return self._items[index]

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> List[str]:
        return [item.name for item in self._items]

    def extend(self, items: Iterable[CandidateFile]) -> None:
        self._check_editable()
        self._items.extend(items)

    def remove(self, index: int) -> CandidateFile:
        self._check_editable()
        return self._items.pop(index)

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        self._frozen = False

    def _check_editable(self) -> None:
        if self._frozen:
            raise RuntimeError("The upload set cannot change while a merge is being submitted.")


class UploadCollector:
    """
    Client side of the merge service.

    Collects candidate files in order, keeps only presentation files, and posts
    them as one multipart request. A failed submission leaves the selection as
    it was so it can be retried.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        extension: str = ".pptx",
        field_name: str = "files",
        timeout: float = 300.0,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        self.extension = extension
        self.field_name = field_name
        self.timeout = timeout
        self.uploads = UploadSet()

    @property
    def can_merge(self) -> bool:
        return len(self.uploads) > 0

    def add_files(self, candidates: Iterable[Union[str, Path, CandidateFile]]) -> int:
        files = [c if isinstance(c, CandidateFile) else CandidateFile.from_path(c) for c in candidates]
        accepted = filter_documents(files, self.extension, name=lambda f: f.name)

        if files and not accepted:
            raise UploadRejectedError(f"Please select {self.extension} files only.")

        self.uploads.extend(accepted)
        return len(accepted)

    def remove_file(self, index: int) -> CandidateFile:
        return self.uploads.remove(index)

    def submit(self) -> Optional[MergeResult]:
        if not self.can_merge:
            return None

        self.uploads.freeze()
        try:
            parts = [
                (self.field_name, (item.name, item.read(), PPTX_MIME_TYPE))
                for item in self.uploads
            ]
            try:
                response = self.session.post(
                    urljoin(self.base_url, "merge"), files=parts, timeout=self.timeout
                )
            except requests.RequestException as exc:
                raise MergeRequestError("The files could not be merged.") from exc

            if not response.ok:
                raise MergeRequestError("The files could not be merged.", status_code=response.status_code)

            try:
                download_url = response.json()["downloadUrl"]
            except (ValueError, KeyError, TypeError) as exc:
                raise MergeRequestError(
                    "The merge service sent an unreadable answer.", status_code=response.status_code
                ) from exc
            return MergeResult(download_url=download_url, absolute_url=urljoin(self.base_url, download_url))
        finally:
            self.uploads.thaw()

    def download(self, result: MergeResult, destination: Union[str, Path]) -> Path:
        destination = Path(destination)
        if destination.is_dir():
            destination = destination / Path(result.download_url).name

        try:
            response = self.session.get(result.absolute_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise MergeRequestError("The merged deck could not be downloaded.") from exc

        destination.write_bytes(response.content)
        return destination
