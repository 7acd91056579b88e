# This project was developed with assistance from AI tools.
"""Tests for the Drive and Gmail REST clients (httpx mock transport)."""

import base64

import httpx
import pytest

from src.clients import GmailClient, GoogleDriveClient, UpstreamUnavailable


def _drive(handler, token="tok"):
    return GoogleDriveClient(
        base_url="https://drive.test/v3",
        token_provider=lambda: token,
        transport=httpx.MockTransport(handler),
    )


def _gmail(handler, token="tok"):
    return GmailClient(
        base_url="https://gmail.test/v1/users/me",
        token_provider=lambda: token,
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# Drive
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_folder_contents_follows_pagination():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        assert request.url.path == "/v3/files"
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.url.params["q"] == "'root' in parents and trashed = false"
        if "pageToken" not in request.url.params:
            return httpx.Response(
                200,
                json={
                    "files": [
                        {
                            "id": "f1",
                            "name": "Appraisal.pdf",
                            "mimeType": "application/pdf",
                            "size": "500000",
                            "modifiedTime": "2026-03-01T12:00:00.000Z",
                        }
                    ],
                    "nextPageToken": "p2",
                },
            )
        return httpx.Response(
            200,
            json={
                "files": [
                    {"id": "d1", "name": "Title", "mimeType": "application/vnd.google-apps.folder"}
                ]
            },
        )

    client = _drive(handler)
    items = await client.list_folder_contents("root")
    await client.aclose()

    assert len(seen) == 2
    assert [i.id for i in items] == ["f1", "d1"]
    assert items[0].size == 500_000
    assert items[0].modified_time.year == 2026
    assert not items[0].is_folder
    assert items[1].is_folder
    assert items[1].size is None


@pytest.mark.asyncio
async def test_download_file_returns_bytes():
    def handler(request):
        assert request.url.path == "/v3/files/f1"
        assert request.url.params["alt"] == "media"
        return httpx.Response(200, content=b"%PDF")

    client = _drive(handler)
    assert await client.download_file("f1") == b"%PDF"
    await client.aclose()


@pytest.mark.asyncio
async def test_http_error_maps_to_upstream_unavailable():
    client = _drive(lambda request: httpx.Response(403, json={"error": "forbidden"}))
    with pytest.raises(UpstreamUnavailable, match="403"):
        await client.list_folder_contents("root")
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_error_maps_to_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _drive(handler)
    with pytest.raises(UpstreamUnavailable, match="unreachable"):
        await client.list_folder_contents("root")
    await client.aclose()


@pytest.mark.asyncio
async def test_missing_token_is_upstream_unavailable():
    def handler(request):
        raise AssertionError("no request should be sent without a token")

    client = _drive(handler, token=None)
    with pytest.raises(UpstreamUnavailable, match="not authorized"):
        await client.list_folder_contents("root")
    await client.aclose()


# ---------------------------------------------------------------------------
# Gmail
# ---------------------------------------------------------------------------


_THREAD = {
    "id": "t1",
    "messages": [
        {
            "id": "m1",
            "threadId": "t1",
            "snippet": "Please find attached",
            "payload": {
                "headers": [
                    {"name": "Subject", "value": "Docs for 123 Main St"},
                    {"name": "From", "value": "Jane Doe <jane@example.com>"},
                    {"name": "to", "value": "me@broker.com"},
                ],
                "parts": [
                    {"mimeType": "text/plain", "body": {"size": 20}},
                    {
                        "mimeType": "multipart/mixed",
                        "parts": [
                            {
                                "mimeType": "application/pdf",
                                "filename": "Lease.pdf",
                                "body": {"attachmentId": "att-1", "size": 1234},
                            }
                        ],
                    },
                ],
            },
        }
    ],
}


@pytest.mark.asyncio
async def test_list_messages_passes_query():
    def handler(request):
        assert request.url.path == "/v1/users/me/messages"
        assert request.url.params["q"] == "has:attachment"
        assert request.url.params["maxResults"] == "10"
        return httpx.Response(200, json={"messages": [{"id": "m1", "threadId": "t1"}]})

    client = _gmail(handler)
    refs = await client.list_messages("has:attachment", 10)
    await client.aclose()

    assert [(r.id, r.thread_id) for r in refs] == [("m1", "t1")]


@pytest.mark.asyncio
async def test_list_messages_empty_mailbox():
    client = _gmail(lambda request: httpx.Response(200, json={"resultSizeEstimate": 0}))
    assert await client.list_messages("q", 5) == []
    await client.aclose()


@pytest.mark.asyncio
async def test_get_thread_parses_headers_and_nested_attachments():
    def handler(request):
        assert request.url.path == "/v1/users/me/threads/t1"
        assert request.url.params["format"] == "full"
        return httpx.Response(200, json=_THREAD)

    client = _gmail(handler)
    (message,) = await client.get_thread("t1")
    await client.aclose()

    assert message.subject == "Docs for 123 Main St"
    assert message.sender == "Jane Doe <jane@example.com>"
    assert message.to == "me@broker.com"
    assert message.cc is None
    assert message.snippet == "Please find attached"
    (attachment,) = message.attachments
    assert attachment.attachment_id == "att-1"
    assert attachment.filename == "Lease.pdf"
    assert attachment.size == 1234


@pytest.mark.asyncio
async def test_get_attachment_decodes_unpadded_base64url():
    raw = b"%PDF-1.4 \xff\xfe binary"
    encoded = base64.urlsafe_b64encode(raw).decode().rstrip("=")

    def handler(request):
        assert request.url.path == "/v1/users/me/messages/m1/attachments/att-1"
        return httpx.Response(200, json={"data": encoded, "size": len(raw)})

    client = _gmail(handler)
    assert await client.get_attachment("m1", "att-1") == raw
    await client.aclose()


@pytest.mark.asyncio
async def test_undecodable_attachment_is_upstream_unavailable():
    client = _gmail(lambda request: httpx.Response(200, json={"data": "a"}))
    with pytest.raises(UpstreamUnavailable, match="Undecodable attachment att-1"):
        await client.get_attachment("m1", "att-1")
    await client.aclose()


@pytest.mark.asyncio
async def test_non_json_thread_is_upstream_unavailable():
    client = _gmail(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(UpstreamUnavailable, match="invalid JSON"):
        await client.get_thread("t1")
    await client.aclose()


@pytest.mark.asyncio
async def test_thread_message_without_id_is_upstream_unavailable():
    client = _gmail(lambda request: httpx.Response(200, json={"messages": [{"snippet": "x"}]}))
    with pytest.raises(UpstreamUnavailable, match="Malformed Gmail thread t1"):
        await client.get_thread("t1")
    await client.aclose()


@pytest.mark.asyncio
async def test_drive_listing_that_is_not_an_object_is_upstream_unavailable():
    client = _drive(lambda request: httpx.Response(200, json=["f1", "f2"]))
    with pytest.raises(UpstreamUnavailable, match="unexpected payload"):
        await client.list_folder_contents("root")
    await client.aclose()
