from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["greetings"])

HELLO_TEXT = "Hello world!"
HEY_TEXT = "Hey there!"


@router.get("/", response_class=PlainTextResponse)
async def hello():
    """Static greeting."""
    return PlainTextResponse(HELLO_TEXT)


# No decorator: registered explicitly below
async def manual_hello():
    """Second static greeting."""
    return PlainTextResponse(HEY_TEXT)


router.add_api_route(
    "/hey",
    manual_hello,
    methods=["GET"],
    response_class=PlainTextResponse,
)
