from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class MergeStage(str, Enum):
    received = "received"
    normalizing = "normalizing"
    base_loaded = "base_loaded"
    sources_registered = "sources_registered"
    slides_appended = "slides_appended"
    written = "written"
    failed = "failed"
    responded = "responded"


class FileDescriptor(BaseModel):
    filename: str
    download_url: str
    size_bytes: int
    updated_at: datetime
