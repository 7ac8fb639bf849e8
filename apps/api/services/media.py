"""Media ingestion: type classification, embed URL parsing and the two upload paths.

Small images are proxied through the API to the media host. Video, audio and
anything over the proxy size cutoff go straight from the client to the host
with a short-lived signed upload ticket.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from fastapi import UploadFile

from config import settings
from schemas import MediaType
from services.errors import DependencyError, InvalidInputError
from services.session_token import issue_token, read_token

logger = logging.getLogger(__name__)

UPLOAD_TICKET_TYPE = "rankmaker_upload"
PROXY_PATH = "proxy"
DIRECT_PATH = "direct"

ALLOWED_DIRECT_CONTENT_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "video/quicktime",
    "video/x-msvideo",
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
    "audio/webm",
)

PROXY_CONTENT_TYPES = tuple(t for t in ALLOWED_DIRECT_CONTENT_TYPES if t.startswith("image/"))

# Tried in order; first match wins.
EMBED_PATTERNS: Tuple[Tuple[MediaType, "re.Pattern[str]"], ...] = (
    (MediaType.YOUTUBE, re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})")),
    (MediaType.YOUTUBE, re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})")),
    (MediaType.TWITTER, re.compile(r"(?:twitter\.com|x\.com)/\w+/status/(\d+)")),
    (MediaType.INSTAGRAM, re.compile(r"instagram\.com/(?:p|reel)/([a-zA-Z0-9_-]+)")),
)


@dataclass(frozen=True)
class EmbedMatch:
    type: MediaType
    embed_id: str
    media_url: str

    def as_response(self) -> Dict[str, Any]:
        return {"type": self.type.value, "embedId": self.embed_id, "mediaUrl": self.media_url}


@dataclass(frozen=True)
class IngestedMedia:
    url: str
    media_type: MediaType
    original_name: str

    def as_response(self) -> Dict[str, Any]:
        return {"url": self.url, "originalName": self.original_name, "mediaType": self.media_type.value}


def classify(mime_type: Optional[str], file_name: Optional[str]) -> MediaType:
    """GIF wins over the generic checks; unknown types default to IMAGE."""
    mime = (mime_type or "").lower()
    name = (file_name or "").lower()
    if mime == "image/gif" or name.endswith(".gif"):
        return MediaType.GIF
    if mime.startswith("video/"):
        return MediaType.VIDEO
    if mime.startswith("audio/"):
        return MediaType.AUDIO
    return MediaType.IMAGE


def parse_embed_url(url: str) -> Optional[EmbedMatch]:
    text = (url or "").strip()
    if not text:
        return None
    for media_type, pattern in EMBED_PATTERNS:
        match = pattern.search(text)
        if match:
            return EmbedMatch(type=media_type, embed_id=match.group(1), media_url=text)
    return None


def choose_upload_path(size_bytes: int, mime_type: Optional[str], file_name: Optional[str] = None) -> str:
    media_type = classify(mime_type, file_name)
    if media_type in (MediaType.VIDEO, MediaType.AUDIO):
        return DIRECT_PATH
    if int(size_bytes or 0) > settings.PROXY_UPLOAD_MAX_BYTES:
        return DIRECT_PATH
    return PROXY_PATH


def _safe_filename(name: str) -> str:
    base = os.path.basename(name or "upload")
    cleaned = "".join(ch if ch.isalnum() or ch in {"-", "_", "."} else "_" for ch in base)
    return cleaned or "upload"


def suffixed_pathname(name: str) -> str:
    """Add a random suffix so two uploads with the same name never collide."""
    safe = _safe_filename(name)
    stem, ext = os.path.splitext(safe)
    return f"{stem}-{secrets.token_hex(8)}{ext}"


def _require_proxy_content_type(name: str, content_type: str) -> None:
    if content_type not in PROXY_CONTENT_TYPES:
        raise InvalidInputError(f"{name}: content type not allowed: {content_type or 'unknown'}")


def _require_host_url() -> str:
    host_url = (settings.MEDIA_HOST_URL or "").strip().rstrip("/")
    if not host_url:
        raise DependencyError("Media host not configured")
    return host_url


def public_url_for(pathname: str) -> str:
    base = (settings.MEDIA_PUBLIC_BASE_URL or settings.MEDIA_HOST_URL or "").strip().rstrip("/")
    return f"{base}/{pathname}"


class MediaHostClient:
    """Thin client for the write-once blob host."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or _require_host_url()).rstrip("/")
        self.token = token if token is not None else settings.MEDIA_HOST_TOKEN
        self.timeout = timeout or settings.MEDIA_HOST_TIMEOUT_SECONDS
        self.transport = transport

    async def _put(self, url: str, content: bytes, content_type: str, bearer: str) -> Dict[str, Any]:
        headers = {"Content-Type": content_type or "application/octet-stream"}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.put(url, content=content, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Media host upload to %s failed: %s", url, exc)
            raise DependencyError("Media host upload failed") from exc
        try:
            return response.json()
        except ValueError:
            return {}

    async def put(self, pathname: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``pathname`` and return its public URL."""
        body = await self._put(f"{self.base_url}/{pathname}", content, content_type, self.token)
        return str(body.get("url") or public_url_for(pathname))

    async def put_direct(self, ticket: Dict[str, Any], content: bytes) -> str:
        """Client-direct upload with a ticket from ``create_direct_upload_ticket``."""
        body = await self._put(ticket["uploadUrl"], content, ticket["contentType"], ticket["token"])
        return str(body.get("url") or ticket["url"])


def create_direct_upload_ticket(pathname: str, content_type: str, size: Optional[int] = None) -> Dict[str, Any]:
    content_type = (content_type or "").lower().strip()
    if content_type not in ALLOWED_DIRECT_CONTENT_TYPES:
        raise InvalidInputError(f"Content type not allowed: {content_type or 'unknown'}")
    if size is not None and int(size) > settings.DIRECT_UPLOAD_MAX_BYTES:
        raise InvalidInputError("File exceeds the maximum upload size")

    host_url = _require_host_url()
    stored_pathname = suffixed_pathname(pathname)
    token, expires_at = issue_token(
        UPLOAD_TICKET_TYPE,
        {
            "pathname": stored_pathname,
            "contentType": content_type,
            "maxSize": settings.DIRECT_UPLOAD_MAX_BYTES,
        },
        timedelta(minutes=int(settings.DIRECT_UPLOAD_TOKEN_TTL_MINUTES)),
    )
    return {
        "token": token,
        "uploadUrl": f"{host_url}/{stored_pathname}",
        "url": public_url_for(stored_pathname),
        "pathname": stored_pathname,
        "contentType": content_type,
        "mediaType": classify(content_type, pathname).value,
        "maximumSizeInBytes": settings.DIRECT_UPLOAD_MAX_BYTES,
        "expiresAt": int(expires_at.timestamp()),
    }


def decode_direct_upload_ticket(token: str) -> Dict[str, Any]:
    try:
        return read_token(token, UPLOAD_TICKET_TYPE)
    except ValueError as exc:
        raise InvalidInputError("Invalid or expired upload token") from exc


async def ingest(
    file_name: str,
    content_type: str,
    content: bytes,
    host: MediaHostClient,
) -> IngestedMedia:
    """Upload one file by whichever path its size/type calls for."""
    media_type = classify(content_type, file_name)
    if choose_upload_path(len(content), content_type, file_name) == DIRECT_PATH:
        ticket = create_direct_upload_ticket(file_name, content_type, len(content))
        url = await host.put_direct(ticket, content)
    else:
        _require_proxy_content_type(file_name, (content_type or "").lower())
        url = await host.put(suffixed_pathname(file_name), content, content_type or "application/octet-stream")
    return IngestedMedia(url=url, media_type=media_type, original_name=file_name)


async def upload_files_service(files: Sequence[UploadFile], host: MediaHostClient) -> Dict[str, List[Dict[str, Any]]]:
    """Server-proxied batch upload. Every file is checked before any is stored."""
    if not files:
        raise InvalidInputError("No files provided")

    staged: List[Tuple[str, str, bytes]] = []
    for upload in files:
        name = upload.filename or "upload"
        content_type = (upload.content_type or "").lower()
        content = await upload.read()
        if not content:
            raise InvalidInputError(f"{name} is empty")
        if choose_upload_path(len(content), content_type, name) != PROXY_PATH:
            raise InvalidInputError(f"{name} must be uploaded directly (video, audio or large file)")
        _require_proxy_content_type(name, content_type)
        staged.append((name, content_type, content))

    uploaded = []
    for name, content_type, content in staged:
        url = await host.put(suffixed_pathname(name), content, content_type or "application/octet-stream")
        uploaded.append(IngestedMedia(url=url, media_type=classify(content_type, name), original_name=name))

    logger.info("Uploaded %d file(s) through the media proxy", len(uploaded))
    return {"files": [item.as_response() for item in uploaded]}
