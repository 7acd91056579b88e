# This project was developed with assistance from AI tools.
"""Ingestion adapters: Drive folders, mailbox threads and direct uploads."""

from .context import IngestionContext, auto_assign, with_retry
from .drive import sync_from_folder, walk_folder
from .mailbox import expand_threads, sync_from_mailbox
from .upload import upload_document

__all__ = [
    "IngestionContext",
    "auto_assign",
    "expand_threads",
    "sync_from_folder",
    "sync_from_mailbox",
    "upload_document",
    "walk_folder",
    "with_retry",
]
