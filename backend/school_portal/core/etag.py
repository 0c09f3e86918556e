"""ETag-aware CSV download responses."""

import hashlib

from fastapi import Request, status
from fastapi.responses import Response


def compute_etag(content: str | bytes) -> str:
    """Weak ETag (``W/"<md5>"``) for a response body."""
    content_bytes = content.encode("utf-8") if isinstance(content, str) else content
    return f'W/"{hashlib.md5(content_bytes).hexdigest()}"'


def _opaque(tag: str) -> str:
    return tag.strip().removeprefix("W/").strip('"')


def check_if_none_match(request: Request, etag: str) -> bool:
    """True when the client's If-None-Match names ``etag`` (or ``*``)."""
    header = request.headers.get("If-None-Match")
    if not header:
        return False
    if header.strip() == "*":
        return True
    return _opaque(etag) in {_opaque(candidate) for candidate in header.split(",")}


def csv_download(request: Request, content: str, filename: str) -> Response:
    """
    Build a ``text/csv`` attachment response.

    Returns 304 Not Modified with the ETag when the client already holds the
    same content.
    """
    etag = compute_etag(content)
    if check_if_none_match(request, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})

    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "ETag": etag,
        },
    )
