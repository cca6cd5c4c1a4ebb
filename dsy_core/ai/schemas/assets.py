"""
Asset Schemas - reference material attached to a generation request.

Assets belong to the caller; the orchestration layer only reads them for
the duration of one request.
"""

import base64
import binascii
import re
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

_DATA_URI_RE = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


class AssetKind(str, Enum):
    """Kinds of reference material a user can attach."""
    IMAGE = "image"
    LINK = "link"
    DOCUMENT = "document"


class Asset(BaseModel):
    """
    A single attached asset.

    Images carry a data URI payload (data:image/png;base64,...).
    Links and documents carry a URI or a text reference.
    """
    kind: AssetKind
    payload: str = Field(default="", description="Data URI, URL or text reference")
    name: str = Field(default="", description="Display name")

    @property
    def is_image(self) -> bool:
        return self.kind == AssetKind.IMAGE


def decode_data_uri(payload: Optional[str]) -> Optional[Tuple[str, bytes]]:
    """
    Split a base64 data URI into (mime_type, raw_bytes).

    Returns None for anything that is not a well-formed base64 data URI.
    """
    if not payload or not payload.startswith("data:"):
        return None
    match = _DATA_URI_RE.match(payload.strip())
    if not match:
        return None
    mime_type, encoded = match.groups()
    try:
        return mime_type, base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError):
        return None


def image_assets(assets: Optional[Sequence[Asset]]) -> List[Asset]:
    return [a for a in assets or [] if a.kind == AssetKind.IMAGE]


def link_assets(assets: Optional[Sequence[Asset]]) -> List[Asset]:
    return [a for a in assets or [] if a.kind == AssetKind.LINK]


def has_images(assets: Optional[Sequence[Asset]]) -> bool:
    return any(a.kind == AssetKind.IMAGE for a in assets or [])
