from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .common import FileDescriptor


class MergeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    download_url: str = Field(..., alias="downloadUrl", description="Relative URL of the merged deck.")


class MergeErrorResponse(BaseModel):
    error: str


class OutputListing(BaseModel):
    files: List[FileDescriptor] = Field(default_factory=list)
