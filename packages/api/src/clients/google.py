# This project was developed with assistance from AI tools.
"""Google Drive and Gmail REST clients.

Thin ``httpx.AsyncClient`` wrappers that translate the v3 Drive and v1 Gmail
JSON payloads into the shapes in ``schemas.upstream``. Access tokens come from
a caller-supplied provider; OAuth token exchange lives outside this service.

Every transport error, non-2xx response and malformed payload surfaces as
``UpstreamUnavailable``.
"""

import base64
import binascii
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from ..core.config import settings
from ..schemas.upstream import DriveItem, MailAttachment, MailMessage, MessageRef
from .base import UpstreamUnavailable

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

TokenProvider = Callable[[], str | None]


def _settings_token() -> str | None:
    return settings.GOOGLE_ACCESS_TOKEN


class _GoogleApiClient:
    """Shared request plumbing: auth header, timeout, error mapping."""

    _service_name = "google"

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider = _settings_token,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout or settings.GOOGLE_API_TIMEOUT,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        token = self._token_provider()
        if not token:
            raise UpstreamUnavailable(f"{self._service_name} is not authorized (no access token)")
        try:
            response = await self._client.get(
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailable(
                f"{self._service_name} returned {exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"{self._service_name} unreachable: {exc}") from exc
        return response

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict:
        response = await self._get(path, params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(f"{self._service_name} sent invalid JSON for {path}") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"{self._service_name} sent an unexpected payload for {path}")
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()


def _parse_size(raw: Any) -> int | None:
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _parse_time(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_drive_item(f: dict) -> DriveItem:
    mime_type = f.get("mimeType") or "application/octet-stream"
    return DriveItem(
        id=f["id"],
        name=f.get("name", ""),
        mime_type=mime_type,
        size=_parse_size(f.get("size")),
        modified_time=_parse_time(f.get("modifiedTime")),
        is_folder=mime_type == FOLDER_MIME_TYPE,
    )


class GoogleDriveClient(_GoogleApiClient):
    """Folder listing and file download against the Drive v3 API."""

    _service_name = "Google Drive"

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(base_url or settings.GOOGLE_DRIVE_API_URL, **kwargs)

    async def list_folder_contents(self, folder_id: str) -> list[DriveItem]:
        """Return the direct children of a folder, following pagination."""
        items: list[DriveItem] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {
                "q": f"'{folder_id}' in parents and trashed = false",
                "fields": "nextPageToken, files(id, name, mimeType, size, modifiedTime)",
                "pageSize": 1000,
            }
            if page_token:
                params["pageToken"] = page_token
            payload = await self._get_json("/files", params)
            try:
                items.extend(_parse_drive_item(f) for f in payload.get("files", []))
            except (KeyError, TypeError, ValueError) as exc:
                raise UpstreamUnavailable(
                    f"Malformed Drive listing for {folder_id}: {exc}"
                ) from exc
            page_token = payload.get("nextPageToken")
            if not page_token:
                logger.debug("Listed %d items in Drive folder %s", len(items), folder_id)
                return items

    async def download_file(self, file_id: str) -> bytes:
        response = await self._get(f"/files/{file_id}", {"alt": "media"})
        return response.content


def _header(headers: list[dict], name: str) -> str | None:
    lowered = name.lower()
    for h in headers:
        if h.get("name", "").lower() == lowered:
            return h.get("value")
    return None


def _collect_attachments(part: dict, found: list[MailAttachment]) -> None:
    """Walk a MIME part tree collecting every part that carries a file."""
    body = part.get("body") or {}
    filename = part.get("filename")
    if filename and body.get("attachmentId"):
        found.append(
            MailAttachment(
                attachment_id=body["attachmentId"],
                filename=filename,
                mime_type=part.get("mimeType") or "application/octet-stream",
                size=_parse_size(body.get("size")),
            )
        )
    for child in part.get("parts") or []:
        _collect_attachments(child, found)


def _parse_message(raw: dict) -> MailMessage:
    payload = raw.get("payload") or {}
    headers = payload.get("headers") or []
    attachments: list[MailAttachment] = []
    _collect_attachments(payload, attachments)
    return MailMessage(
        id=raw["id"],
        thread_id=raw.get("threadId", ""),
        subject=_header(headers, "Subject"),
        sender=_header(headers, "From"),
        to=_header(headers, "To"),
        cc=_header(headers, "Cc"),
        snippet=raw.get("snippet"),
        date=_header(headers, "Date"),
        attachments=attachments,
    )


class GmailClient(_GoogleApiClient):
    """Message listing, thread expansion and attachment download (Gmail v1)."""

    _service_name = "Gmail"

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(base_url or settings.GMAIL_API_URL, **kwargs)

    async def list_messages(self, query: str, max_results: int) -> list[MessageRef]:
        payload = await self._get_json("/messages", {"q": query, "maxResults": max_results})
        try:
            return [
                MessageRef(id=m["id"], thread_id=m.get("threadId", m["id"]))
                for m in payload.get("messages", [])
            ]
        except (KeyError, TypeError) as exc:
            raise UpstreamUnavailable(f"Malformed Gmail message list: {exc}") from exc

    async def get_thread(self, thread_id: str) -> list[MailMessage]:
        payload = await self._get_json(f"/threads/{thread_id}", {"format": "full"})
        try:
            return [_parse_message(m) for m in payload.get("messages", [])]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailable(f"Malformed Gmail thread {thread_id}: {exc}") from exc

    async def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        payload = await self._get_json(f"/messages/{message_id}/attachments/{attachment_id}")
        data = payload.get("data", "")
        # Gmail returns unpadded base64url
        try:
            return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
        except (binascii.Error, ValueError, TypeError) as exc:
            raise UpstreamUnavailable(
                f"Undecodable attachment {attachment_id} on message {message_id}"
            ) from exc
