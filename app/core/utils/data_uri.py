"""Helpers for self-describing base64 data URIs (data:<mime>;base64,<data>)."""

from __future__ import annotations
import base64
import binascii
import re

_DATA_URI = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^;,]*)*?;base64,(?P<data>.*)$",
    re.DOTALL,
)


def encode_data_uri(data: bytes, media_type: str) -> str:
    b64 = base64.b64encode(data or b"").decode("ascii")
    return f"data:{media_type};base64,{b64}"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a base64 data URI into (media_type, payload bytes).
    Raises ValueError for anything that is not a base64 data URI.
    """
    m = _DATA_URI.match(uri or "")
    if not m:
        raise ValueError("Expected a base64 data URI.")
    try:
        payload = base64.b64decode(m.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload in data URI: {e}") from e
    return (m.group("mime") or "").lower(), payload
