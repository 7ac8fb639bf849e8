import httpx
import pytest

from config import settings
from main import app
from routers.upload import get_media_host
from schemas import MediaType
from services.errors import DependencyError, InvalidInputError
from services.media import (
    MediaHostClient,
    choose_upload_path,
    classify,
    create_direct_upload_ticket,
    decode_direct_upload_ticket,
    ingest,
    parse_embed_url,
)

HOST = "https://blob.example.com"


@pytest.mark.parametrize(
    "mime,name,expected",
    [
        ("image/gif", "foo.png", MediaType.GIF),
        ("image/png", "foo.gif", MediaType.GIF),
        ("video/mp4", "x", MediaType.VIDEO),
        ("audio/mpeg", "x", MediaType.AUDIO),
        ("application/octet-stream", "x", MediaType.IMAGE),
        (None, None, MediaType.IMAGE),
    ],
)
def test_classify(mime, name, expected):
    assert classify(mime, name) == expected


@pytest.mark.parametrize(
    "url,media_type,embed_id",
    [
        ("https://youtu.be/dQw4w9WgXcQ", MediaType.YOUTUBE, "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10", MediaType.YOUTUBE, "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", MediaType.YOUTUBE, "dQw4w9WgXcQ"),
        ("https://youtube.com/shorts/abcdefghijk", MediaType.YOUTUBE, "abcdefghijk"),
        ("https://x.com/someone/status/1234567890", MediaType.TWITTER, "1234567890"),
        ("https://twitter.com/someone/status/42", MediaType.TWITTER, "42"),
        ("https://www.instagram.com/reel/Cabc_123/", MediaType.INSTAGRAM, "Cabc_123"),
        ("https://www.instagram.com/p/XYZ/", MediaType.INSTAGRAM, "XYZ"),
    ],
)
def test_parse_embed_url(url, media_type, embed_id):
    match = parse_embed_url(url)
    assert match is not None
    assert match.type == media_type
    assert match.embed_id == embed_id
    assert match.media_url == url


def test_parse_embed_url_unrecognized():
    assert parse_embed_url("https://example.com") is None
    assert parse_embed_url("") is None


def test_choose_upload_path():
    assert choose_upload_path(1024, "image/png") == "proxy"
    assert choose_upload_path(settings.PROXY_UPLOAD_MAX_BYTES + 1, "image/png") == "direct"
    assert choose_upload_path(10, "video/mp4") == "direct"
    assert choose_upload_path(10, "audio/ogg") == "direct"


def _recording_host():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"url": f"https://cdn.example.com{request.url.path}"})

    host = MediaHostClient(base_url=HOST, token="host-secret", transport=httpx.MockTransport(handler))
    return host, calls


@pytest.mark.asyncio
async def test_proxy_upload_returns_urls_and_media_types(api_client):
    host, calls = _recording_host()
    app.dependency_overrides[get_media_host] = lambda: host
    try:
        response = await api_client.post(
            "/upload",
            files=[
                ("files", ("cat.png", b"png-bytes", "image/png")),
                ("files", ("dance.gif", b"gif-bytes", "image/gif")),
            ],
        )
    finally:
        app.dependency_overrides.pop(get_media_host, None)

    assert response.status_code == 200
    files = response.json()["files"]
    assert [(row["originalName"], row["mediaType"]) for row in files] == [("cat.png", "IMAGE"), ("dance.gif", "GIF")]
    assert all(row["url"].startswith("https://cdn.example.com/cat-") or row["url"].startswith("https://cdn.example.com/dance-") for row in files)
    assert len(calls) == 2
    assert calls[0].headers["authorization"] == "Bearer host-secret"


@pytest.mark.asyncio
async def test_proxy_upload_rejects_whole_batch(api_client):
    host, calls = _recording_host()
    app.dependency_overrides[get_media_host] = lambda: host
    try:
        response = await api_client.post(
            "/upload",
            files=[
                ("files", ("cat.png", b"png-bytes", "image/png")),
                ("files", ("clip.mp4", b"mp4-bytes", "video/mp4")),
            ],
        )
    finally:
        app.dependency_overrides.pop(get_media_host, None)

    assert response.status_code == 400
    assert calls == []


@pytest.mark.asyncio
async def test_upload_without_media_host_is_dependency_error(api_client, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_HOST_URL", "")
    response = await api_client.post("/upload", files=[("files", ("cat.png", b"x", "image/png"))])
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_client_token_handshake(api_client, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_HOST_URL", HOST)
    monkeypatch.setattr(settings, "MEDIA_PUBLIC_BASE_URL", "https://cdn.example.com")

    response = await api_client.post(
        "/upload/client-token",
        json={"pathname": "clip.mp4", "contentType": "video/mp4", "size": 5_000_000},
    )
    assert response.status_code == 200
    ticket = response.json()
    assert ticket["mediaType"] == "VIDEO"
    assert ticket["uploadUrl"].startswith(f"{HOST}/clip-")
    assert ticket["url"].startswith("https://cdn.example.com/clip-")

    claims = decode_direct_upload_ticket(ticket["token"])
    assert claims["contentType"] == "video/mp4"
    assert claims["pathname"] == ticket["pathname"]

    bad_type = await api_client.post(
        "/upload/client-token", json={"pathname": "notes.pdf", "contentType": "application/pdf"}
    )
    assert bad_type.status_code == 400

    too_big = await api_client.post(
        "/upload/client-token",
        json={"pathname": "clip.mp4", "contentType": "video/mp4", "size": settings.DIRECT_UPLOAD_MAX_BYTES + 1},
    )
    assert too_big.status_code == 400


@pytest.mark.asyncio
async def test_ingest_routes_video_through_direct_ticket(monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_HOST_URL", HOST)
    host, calls = _recording_host()

    video = await ingest("clip.mp4", "video/mp4", b"mp4-bytes", host)
    image = await ingest("cat.png", "image/png", b"png-bytes", host)

    assert video.media_type == MediaType.VIDEO
    assert image.media_type == MediaType.IMAGE
    assert calls[0].headers["authorization"] != "Bearer host-secret"
    assert calls[1].headers["authorization"] == "Bearer host-secret"


@pytest.mark.asyncio
async def test_proxy_upload_only_takes_image_types(api_client):
    host, calls = _recording_host()
    app.dependency_overrides[get_media_host] = lambda: host
    try:
        response = await api_client.post(
            "/upload",
            files=[
                ("files", ("cat.png", b"png-bytes", "image/png")),
                ("files", ("notes.pdf", b"%PDF-1.7", "application/pdf")),
            ],
        )
    finally:
        app.dependency_overrides.pop(get_media_host, None)

    assert response.status_code == 400
    assert "notes.pdf" in response.json()["detail"]
    assert calls == []

    with pytest.raises(InvalidInputError):
        await ingest("notes.pdf", "application/pdf", b"%PDF-1.7", host)
    assert calls == []


def test_ticket_requires_configured_host(monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_HOST_URL", "")
    with pytest.raises(DependencyError):
        create_direct_upload_ticket("clip.mp4", "video/mp4")


@pytest.mark.asyncio
async def test_embed_endpoint(api_client):
    ok = await api_client.post("/upload/embed", json={"url": "https://youtu.be/dQw4w9WgXcQ"})
    assert ok.json() == {"type": "YOUTUBE", "embedId": "dQw4w9WgXcQ", "mediaUrl": "https://youtu.be/dQw4w9WgXcQ"}

    rejected = await api_client.post("/upload/embed", json={"url": "https://example.com"})
    assert rejected.status_code == 400
