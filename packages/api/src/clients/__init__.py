# This project was developed with assistance from AI tools.
"""Clients for the cloud file store and the mailbox."""

from .base import FileStoreClient, MailboxClient, UpstreamUnavailable
from .google import GmailClient, GoogleDriveClient

__all__ = [
    "FileStoreClient",
    "GmailClient",
    "GoogleDriveClient",
    "MailboxClient",
    "UpstreamUnavailable",
]
