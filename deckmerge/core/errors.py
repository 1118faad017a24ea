from __future__ import annotations


class DeckMergeError(Exception):
    """Base class for failures raised while merging presentations."""


class InvalidDeckError(DeckMergeError):
    """The uploaded file is not a readable presentation container."""


class AssemblyError(DeckMergeError):
    """The slide assembler could not load, copy or write a slide."""


class UploadRejectedError(DeckMergeError):
    """None of the selected files carries the presentation extension."""


class MergeRequestError(DeckMergeError):
    """The merge request failed in transport or was answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
