# This project was developed with assistance from AI tools.
"""Data shapes returned by the file-store and mailbox clients."""

from datetime import datetime

from pydantic import BaseModel


class DriveItem(BaseModel):
    id: str
    name: str
    mime_type: str = "application/octet-stream"
    size: int | None = None
    modified_time: datetime | None = None
    is_folder: bool = False


class MessageRef(BaseModel):
    id: str
    thread_id: str


class MailAttachment(BaseModel):
    attachment_id: str
    filename: str
    mime_type: str = "application/octet-stream"
    size: int | None = None


class MailMessage(BaseModel):
    """A single message of an expanded thread; header values are raw strings."""

    id: str
    thread_id: str
    subject: str | None = None
    sender: str | None = None
    to: str | None = None
    cc: str | None = None
    snippet: str | None = None
    date: str | None = None
    attachments: list[MailAttachment] = []


class MailCandidate(BaseModel):
    """The parts of a message the relevance filter looks at."""

    subject: str | None = None
    sender: str | None = None
    to: str | None = None
    cc: str | None = None
    snippet: str | None = None

    @classmethod
    def from_message(cls, message: MailMessage) -> "MailCandidate":
        return cls(
            subject=message.subject,
            sender=message.sender,
            to=message.to,
            cc=message.cc,
            snippet=message.snippet,
        )
