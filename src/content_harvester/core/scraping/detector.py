"""Detect resource type from response headers and sniffed file types.

Provides a small ResourceType enum, a strict `Content-Type` parser and
`detect_resource_type` helper.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional, Tuple

# RFC 2045 token characters
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MEDIA_TYPE_RE = re.compile(rf"^({_TOKEN})/({_TOKEN})$")
_PARAM_RE = re.compile(rf'^\s*({_TOKEN})\s*=\s*(?:"((?:[^"\\]|\\.)*)"|({_TOKEN}))\s*$')


class MediaTypeParamError(ValueError):
    """The media type parsed but one of its parameters did not.

    `media_type` keeps the parsed (lowercased) type.
    """

    def __init__(self, message: str, media_type: str):
        super().__init__(message)
        self.media_type = media_type


class ResourceType(str, Enum):
    HTML = "html"
    PDF = "pdf"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    CSV = "csv"
    XLSX = "xlsx"
    JSON = "json"
    ZIP = "zip"
    TEXT = "text"
    UNKNOWN = "unknown"


def parse_media_type(value: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """Parse a `Content-Type` header into `(media_type, params)`.

    The media type is lowercased, as are parameter names. Raises `ValueError`
    when the header is empty or malformed, and `MediaTypeParamError` when only
    a parameter is malformed.
    """
    if not value or not value.strip():
        raise ValueError("no media type")

    head, *rest = value.split(";")
    media_type = head.strip().lower()
    if not _MEDIA_TYPE_RE.match(media_type):
        raise ValueError(f"malformed media type {head.strip()!r}")

    params: Dict[str, str] = {}
    for raw in rest:
        if not raw.strip():
            # tolerate a trailing ';'
            continue
        m = _PARAM_RE.match(raw)
        if not m:
            raise MediaTypeParamError(
                f"malformed media type parameter {raw.strip()!r}", media_type
            )
        name = m.group(1).lower()
        if name in params:
            raise MediaTypeParamError(
                f"duplicate media type parameter {name!r}", media_type
            )
        quoted, token = m.group(2), m.group(3)
        params[name] = re.sub(r"\\(.)", r"\1", quoted) if quoted is not None else token
    return media_type, params


def detect_resource_type(
    media_type: Optional[str] = None, extension: Optional[str] = None
) -> ResourceType:
    """Detect resource type by media type, falling back to a file extension.

    Heuristics: media type preferred (the sniffed extension of downloaded
    content is more reliable than a generic `application/octet-stream`).
    """
    if media_type:
        c = media_type.lower()
        if c == "text/html" or c == "application/xhtml+xml":
            return ResourceType.HTML
        if c == "application/pdf":
            return ResourceType.PDF
        if c.startswith("image/"):
            return ResourceType.IMAGE
        if c.startswith("video/"):
            return ResourceType.VIDEO
        if c.startswith("audio/"):
            return ResourceType.AUDIO
        if c in ("text/csv", "application/csv"):
            return ResourceType.CSV
        if c == "application/json" or c.endswith("+json"):
            return ResourceType.JSON
        if "zip" in c:
            return ResourceType.ZIP
        if "spreadsheet" in c or "excel" in c:
            return ResourceType.XLSX
        if c.startswith("text/"):
            return ResourceType.TEXT

    ext = (extension or "").lower().lstrip(".")
    if ext == "pdf":
        return ResourceType.PDF
    if ext in ("jpg", "jpeg", "png", "gif", "webp", "bmp", "tif", "ico", "heic", "avif"):
        return ResourceType.IMAGE
    if ext in ("mp4", "webm", "mov", "mkv", "avi", "m4v", "flv"):
        return ResourceType.VIDEO
    if ext in ("mp3", "ogg", "wav", "flac", "m4a", "aac"):
        return ResourceType.AUDIO
    if ext in ("xlsx", "xls"):
        return ResourceType.XLSX
    if ext == "zip":
        return ResourceType.ZIP

    return ResourceType.UNKNOWN
