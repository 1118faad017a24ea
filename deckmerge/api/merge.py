from typing import List, Optional

from fastapi import APIRouter, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from deckmerge.core.config import get_settings
from deckmerge.core.logging import configure_logging
from deckmerge.models import MergeErrorResponse, MergeResponse
from deckmerge.services.merge_service import MergeService
from deckmerge.storage.local import LocalStorage

router = APIRouter(tags=["Merge"])

settings = get_settings()
logger = configure_logging()
storage = LocalStorage()
merge_service = MergeService(storage)


@router.post(
    "/merge",
    summary="Merge the uploaded decks in order and return a download link",
    response_model=MergeResponse,
    responses={400: {"description": "No files uploaded."}, 500: {"model": MergeErrorResponse}},
)
async def merge_decks(files: Optional[List[UploadFile]] = File(None, alias=settings.upload_field)):
    if not files:
        return PlainTextResponse("No files uploaded.", status_code=status.HTTP_400_BAD_REQUEST)

    job = merge_service.create_job()
    try:
        await run_in_threadpool(merge_service.run, files, job)
    except Exception:
        logger.exception("Merge job %s failed at stage %s", job.job_id, job.stage.value)
        merge_service.mark_responded(job)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=MergeErrorResponse(error="Merge failed.").model_dump(),
        )

    merge_service.mark_responded(job)
    logger.info("Merged %s files into %s", len(files), job.output_name)
    return MergeResponse(download_url=f"/output/{job.output_name}").model_dump(by_alias=True)
