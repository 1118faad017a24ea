from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Sequence

from fastapi import UploadFile

from deckmerge.core.config import get_settings
from deckmerge.core.logging import configure_logging
from deckmerge.models.common import MergeStage
from deckmerge.models.job import MergeJob, UploadedDeck
from deckmerge.services.assembler import SlideAssembler
from deckmerge.storage.local import LocalStorage
from deckmerge.utils.file_utils import build_output_name
from deckmerge.utils.pptx_inspect import count_slide_parts, slide_part_numbers


class MergeService:
    """Run a merge job: normalize uploads, load the base deck, append every source's slides, write."""

    def __init__(
        self,
        storage: LocalStorage | None = None,
        assembler_factory: Callable[[], SlideAssembler] = SlideAssembler,
        slide_numbering: str | None = None,
        cleanup_uploads: bool | None = None,
    ) -> None:
        settings = get_settings()
        self.storage = storage or LocalStorage()
        self.assembler_factory = assembler_factory
        self.slide_numbering = slide_numbering or settings.slide_numbering
        self.cleanup_uploads = settings.cleanup_uploads if cleanup_uploads is None else cleanup_uploads
        self.logger = configure_logging()

    def create_job(self) -> MergeJob:
        output_name = build_output_name(extension=self.storage.extension)
        return MergeJob(output_name=output_name, output_path=self.storage.output_path(output_name))

    def run(self, uploads: Sequence[UploadFile], job: Optional[MergeJob] = None) -> MergeJob:
        if not uploads:
            raise ValueError("No files uploaded.")

        job = job or self.create_job()
        self.logger.info("Merge job %s received with %s files", job.job_id, len(uploads))

        try:
            self._normalize(job, uploads)
            assembler = self.assembler_factory()
            self._load_base(job, assembler)
            self._register_sources(job, assembler)
            self._append_slides(job, assembler)
            self._write(job, assembler)
        except Exception as exc:
            write_attempted = job.stage == MergeStage.slides_appended
            job.error = str(exc) or exc.__class__.__name__
            self._advance(job, MergeStage.failed)
            if write_attempted:
                self.storage.cleanup([job.output_path])
            raise
        finally:
            job.completed_at = datetime.utcnow()
            if self.cleanup_uploads:
                self.storage.cleanup(job.working_files)

        return job

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _normalize(self, job: MergeJob, uploads: Sequence[UploadFile]) -> None:
        self._advance(job, MergeStage.normalizing)
        for upload in uploads:
            path = self.storage.save_upload(upload)
            job.decks.append(
                UploadedDeck(
                    filename=upload.filename or path.name,
                    path=path,
                    size_bytes=path.stat().st_size,
                )
            )

    def _load_base(self, job: MergeJob, assembler: SlideAssembler) -> None:
        base = job.designate_base()
        assembler.load_root(base.path)
        self._advance(job, MergeStage.base_loaded)
        self.logger.info("Job %s: base deck %s", job.job_id, base.filename)

    def _register_sources(self, job: MergeJob, assembler: SlideAssembler) -> None:
        for deck in job.sources:
            if deck.path == job.base_file.path:
                continue
            assembler.register_source(deck.path)
        self._advance(job, MergeStage.sources_registered)

    def _append_slides(self, job: MergeJob, assembler: SlideAssembler) -> None:
        for deck in job.sources:
            numbers = self.slide_numbers(deck)
            job.slide_counts.append(len(numbers))
            self.logger.info("File %s has %s slides.", deck.filename, len(numbers))
            for number in numbers:
                assembler.append_slide(deck.path, number)
        self._advance(job, MergeStage.slides_appended)

    def _write(self, job: MergeJob, assembler: SlideAssembler) -> None:
        summary = assembler.write(job.output_path)
        job.slides_written = summary.slide_count
        self._advance(job, MergeStage.written)
        self.logger.info(
            "Merge finished: %s (%s slides, %s ms)", job.output_name, summary.slide_count, summary.duration_ms
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def slide_numbers(self, deck: UploadedDeck) -> List[int]:
        if self.slide_numbering == "listed":
            return slide_part_numbers(deck.path)
        # Assumes slide parts are numbered 1..N without gaps.
        return list(range(1, count_slide_parts(deck.path) + 1))

    def _advance(self, job: MergeJob, stage: MergeStage) -> None:
        job.stage = stage
        self.logger.debug("Job %s -> %s", job.job_id, stage.value)

    def mark_responded(self, job: MergeJob) -> None:
        self._advance(job, MergeStage.responded)
