"""
Purpose:
- Turn an ImageAsset into a data URL that can sit inline in a JSON chat message.
- Reads the payload exactly once; path-backed assets are read in a worker thread.
"""

from __future__ import annotations
import asyncio
import base64
import logging
from pathlib import Path
from ..pipeline.errors import EncodingFailure
from ..pipeline.models import EncodedImage, ImageAsset

logger = logging.getLogger(__name__)

async def _read(asset: ImageAsset) -> bytes:
    if isinstance(asset.source, Path):
        try:
            return await asyncio.to_thread(asset.source.read_bytes)
        except OSError as e:
            raise EncodingFailure(f"Could not read image {asset.source.name}: {e.strerror or e}") from e
    return asset.source

async def encode(asset: ImageAsset) -> EncodedImage:
    media_type = (asset.media_type or "").strip().lower()
    if not media_type.startswith("image/"):
        raise EncodingFailure(f"Unsupported media type: {asset.media_type or 'unknown'}")

    raw = await _read(asset)
    if not raw:
        raise EncodingFailure("Image is empty")

    b64 = base64.b64encode(raw).decode("ascii")
    logger.debug("encoded %s (%d bytes) as %s data URL", asset.filename or "image", len(raw), media_type)
    return EncodedImage(media_type=media_type, data_url=f"data:{media_type};base64,{b64}")
