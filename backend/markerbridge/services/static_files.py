"""
markerbridge: Static File Service
====================================

What:  Resolves a request path under an asset root and reads the file.
How:   root + request path → normalised filesystem path → existence check →
       directory rewrite to index.html → async read → content type by extension.
Who:   Called by routes/assets.py for every GET.

Resolution rules:
    /                 → <root>/index.html
    /sub/             → <root>/sub/index.html   (directories are never listed)
    /app.js           → <root>/app.js
    /missing.html     → AssetNotFoundError (404)
    /locked.html      → AssetReadError (500)    (exists, unreadable)

Known gap:
    The join is a plain path join followed by normalisation, so ".." segments
    can climb out of the root. No containment check is applied; the bridge
    is meant to listen on a trusted local machine.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os

from markerbridge.exceptions import AssetNotFoundError, AssetReadError

logger = logging.getLogger(__name__)

# ── Content Types ─────────────────────────────────────────────────────────
# Only the two types the tracker page needs; everything else is text/plain
CONTENT_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
}
DEFAULT_CONTENT_TYPE = "text/plain"

INDEX_FILE = "index.html"


def content_type_for(path: str) -> str:
    """Map a file path to its content type by extension."""
    return CONTENT_TYPES.get(Path(path).suffix, DEFAULT_CONTENT_TYPE)


@dataclass(frozen=True)
class StaticAsset:
    """A file that was found and read."""

    path: str
    content: bytes
    content_type: str


class StaticFileService:
    """
    Serves files from one asset root.

    The root is made absolute once at construction, so error messages name
    full paths regardless of the working directory at request time.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def resolve(self, request_path: str) -> str:
        """
        Join the request path onto the root and normalise it.

        Leading slashes are stripped first so an absolute request path does
        not replace the root.
        """
        relative = request_path.lstrip("/")
        joined = os.path.join(self.root, relative)
        resolved = os.path.normpath(joined)
        # normpath drops the trailing slash; keep it so "/sub/" reads the same in logs
        if request_path.endswith("/") and not resolved.endswith(os.sep):
            resolved += os.sep
        return resolved

    async def serve(self, request_path: str) -> StaticAsset:
        """
        Resolve and read one asset.

        Raises:
            AssetNotFoundError: Nothing exists at the resolved path.
            AssetReadError: The path (or its index.html) could not be read.
        """
        path = self.resolve(request_path)

        if not await aiofiles.os.path.exists(path):
            raise AssetNotFoundError(path)

        if await aiofiles.os.path.isdir(path):
            path = os.path.join(path, INDEX_FILE)

        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read asset %s: %s", path, str(e))
            raise AssetReadError(path, e)

        logger.debug("Serving %s (%d bytes)", path, len(content))
        return StaticAsset(path=path, content=content, content_type=content_type_for(path))
