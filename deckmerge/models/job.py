from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from .common import MergeStage


@dataclass
class UploadedDeck:
    filename: str
    path: Path
    size_bytes: int


@dataclass
class MergeJob:
    """
    One request-scoped merge.

    ``decks`` holds every normalized upload in submission order. Once the base is
    designated, ``base_file`` and ``sources`` are set explicitly and every later
    step works from those fields rather than from list positions.
    """

    output_name: str
    output_path: Path
    decks: List[UploadedDeck] = field(default_factory=list)
    base_file: Optional[UploadedDeck] = None
    sources: List[UploadedDeck] = field(default_factory=list)
    job_id: str = field(default_factory=lambda: uuid4().hex[:12])
    stage: MergeStage = MergeStage.received
    slide_counts: List[int] = field(default_factory=list)
    slides_written: Optional[int] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    def designate_base(self) -> UploadedDeck:
        if not self.decks:
            raise ValueError("A merge job needs at least one deck.")
        self.base_file = self.decks[0]
        self.sources = list(self.decks[1:])
        return self.base_file

    @property
    def working_files(self) -> List[Path]:
        return [deck.path for deck in self.decks]

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.completed_at is not None
