"""Media upload endpoints: proxied multipart upload, direct-upload handshake, embeds."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from routers.rate_limit import rate_limit
from schemas import ClientUploadRequest, EmbedRequest
from services.errors import InvalidInputError
from services.media import MediaHostClient, create_direct_upload_ticket, parse_embed_url, upload_files_service

router = APIRouter()
logger = logging.getLogger(__name__)


def get_media_host() -> MediaHostClient:
    return MediaHostClient()


@router.post("")
async def upload_files(
    files: List[UploadFile] = File(...),
    _rate_limit: None = Depends(rate_limit("upload")),
    host: MediaHostClient = Depends(get_media_host),
):
    try:
        return await upload_files_service(files, host)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to upload %d file(s)", len(files))
        raise HTTPException(status_code=500, detail="Failed to upload files.")


@router.post("/client-token")
async def create_client_upload_token(
    request: ClientUploadRequest,
    _rate_limit: None = Depends(rate_limit("upload_client_token")),
):
    return create_direct_upload_ticket(request.pathname, request.content_type, request.size)


@router.post("/embed")
async def register_embed(request: EmbedRequest):
    match = parse_embed_url(request.url)
    if match is None:
        raise InvalidInputError("URL not recognized. Supported: YouTube, Twitter/X, Instagram")
    return match.as_response()
