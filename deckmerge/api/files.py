from datetime import datetime, timezone

from fastapi import APIRouter

from deckmerge.models import FileDescriptor, OutputListing
from deckmerge.storage.local import LocalStorage
from deckmerge.utils.file_utils import file_stats

router = APIRouter(prefix="/outputs", tags=["Outputs"])
storage = LocalStorage()


@router.get("", summary="List the merged decks available for download")
async def list_outputs() -> dict:
    files = []
    for path in storage.list_outputs():
        size_bytes, modified = file_stats(path)
        files.append(
            FileDescriptor(
                filename=path.name,
                download_url=f"/output/{path.name}",
                size_bytes=size_bytes,
                updated_at=datetime.fromtimestamp(modified, tz=timezone.utc),
            )
        )

    return OutputListing(files=files).model_dump(mode="json")
