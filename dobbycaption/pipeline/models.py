"""
Purpose:
- Plain value types that flow through the caption pipeline.
- ImageAsset (what the user picked) -> EncodedImage (data URL) -> description -> caption.

Notes:
- Media type detection only looks at the filename or the file header; pixels are never decoded.
"""

from __future__ import annotations
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from PIL import Image, UnidentifiedImageError

SceneDescription = str
Caption = str

class Tone(str, Enum):
    WITTY = "witty"
    BRUTAL = "brutal"
    SARCASTIC = "sarcastic"
    FRIENDLY = "friendly"

    @property
    def label(self) -> str:
        return self.value.capitalize()

DEFAULT_TONE = Tone.WITTY

class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

def sniff_media_type(head: bytes) -> Optional[str]:
    """
    Identify an image format from its header via Pillow (no decode).
    """
    try:
        with Image.open(BytesIO(head)) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None

def guess_media_type(filename: Optional[str], head: bytes = b"") -> Optional[str]:
    if filename:
        guessed, _enc = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    if head:
        return sniff_media_type(head)
    return None

@dataclass(frozen=True)
class ImageAsset:
    """
    One user selection. `source` is either the raw bytes or a path read on encode.
    """
    source: Union[bytes, Path] = field(repr=False)
    media_type: Optional[str] = None
    filename: Optional[str] = None

    @classmethod
    def from_bytes(cls, data: bytes, media_type: Optional[str] = None, filename: Optional[str] = None) -> "ImageAsset":
        # browsers send application/octet-stream when they don't know
        if not media_type or media_type == "application/octet-stream":
            media_type = guess_media_type(filename, data)
        return cls(source=bytes(data), media_type=media_type, filename=filename)

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "ImageAsset":
        p = Path(path)
        return cls(source=p, media_type=media_type or guess_media_type(p.name), filename=p.name)

@dataclass(frozen=True)
class EncodedImage:
    media_type: str
    data_url: str

    def __str__(self) -> str:
        return self.data_url

@dataclass(frozen=True)
class RunSnapshot:
    """
    What the presentation layer gets to see. `output` is the caption, an
    'Error: ...' string, or empty while idle/running.
    """
    state: RunState = RunState.IDLE
    loading: bool = False
    output: str = ""
    run_id: Optional[int] = None
    tone: Tone = DEFAULT_TONE
    has_image: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.state is RunState.FAILED
