"""Rewrites binary response bodies into ``data:`` URIs."""

from __future__ import annotations

import base64
from typing import Collection

from .transport import TransportResult


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def is_binary_content_type(content_type: str | None, binary_content_types: Collection[str]) -> bool:
    if not content_type or not binary_content_types:
        return False
    if content_type in binary_content_types:
        return True
    media_type = _media_type(content_type)
    return any(_media_type(candidate) == media_type for candidate in binary_content_types)


def filter_output(result: TransportResult, binary_content_types: Collection[str]) -> str | None:
    """Return the payload handed to the callback pipeline.

    Non-empty bodies with a listed content type become
    ``data:{content-type};base64,{bytes}``; everything else is the decoded text.
    """
    if result.content and is_binary_content_type(result.content_type, binary_content_types):
        encoded = base64.b64encode(result.content).decode("ascii")
        return f"data:{result.content_type};base64,{encoded}"
    return result.text
