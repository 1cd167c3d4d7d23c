"""Inline image encoding.

Images (document covers and image blocks) are stored inline as
``data:<mime>;base64,<payload>`` strings, so a document row is fully
self-contained. There is no size limit.
"""

import base64
import mimetypes
from pathlib import Path
from typing import Union

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def encode_data_uri(data: bytes, media_type: str | None = None) -> str:
    """Encode raw bytes as a base64 data URI."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type or DEFAULT_MEDIA_TYPE};base64,{payload}"


def guess_media_type(filename: str) -> str:
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or DEFAULT_MEDIA_TYPE


def file_to_data_uri(path: Union[str, Path]) -> str:
    """Read a file and return it as a data URI, guessing the media type from its extension.

    Raises:
        OSError: If the file cannot be read.
    """
    path = Path(path)
    return encode_data_uri(path.read_bytes(), guess_media_type(path.name))
