from .common import FileDescriptor, MergeStage
from .job import MergeJob, UploadedDeck
from .merge import MergeErrorResponse, MergeResponse, OutputListing

__all__ = [
    "FileDescriptor",
    "MergeErrorResponse",
    "MergeJob",
    "MergeResponse",
    "MergeStage",
    "OutputListing",
    "UploadedDeck",
]
