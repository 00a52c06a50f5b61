from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["echo"])


@router.post("/echo", response_class=Response)
async def echo(request: Request):
    """
    Answer with the request body exactly as received.

    The body is read as raw bytes, never decoded, so any byte sequence
    (empty, binary, invalid UTF-8) comes back unchanged. No size limit.
    """
    body = await request.body()
    logger.debug(f"[Echo] {len(body)} bytes")
    return Response(content=body, media_type="text/plain; charset=utf-8")
