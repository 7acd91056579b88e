# This project was developed with assistance from AI tools.
"""Capabilities the ingestion adapters consume from the outside world.

The adapters only depend on these protocols, never on a concrete SDK, so
tests can hand in simple fakes.
"""

from typing import Protocol

from ..schemas.upstream import DriveItem, MailMessage, MessageRef


class UpstreamUnavailable(Exception):
    """Raised when the file store, mailbox or object storage cannot be reached."""


class FileStoreClient(Protocol):
    async def list_folder_contents(self, folder_id: str) -> list[DriveItem]: ...

    async def download_file(self, file_id: str) -> bytes: ...


class MailboxClient(Protocol):
    async def list_messages(self, query: str, max_results: int) -> list[MessageRef]: ...

    async def get_thread(self, thread_id: str) -> list[MailMessage]: ...

    async def get_attachment(self, message_id: str, attachment_id: str) -> bytes: ...
