from __future__ import annotations

import base64
import binascii
import io
import re
from typing import Union

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import CaptureError

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg);base64,", re.IGNORECASE)


def decode_image(image: Union[str, bytes, None]) -> bytes:
    """Return raw image bytes from a data URL, a base64 string or bytes.

    Raises CaptureError when there is no usable frame.
    """
    if image is None:
        raise CaptureError("No frame available")

    if isinstance(image, str):
        cleaned = _DATA_URL_PREFIX.sub("", image.strip())
        if not cleaned:
            raise CaptureError("No frame available")
        try:
            raw = base64.b64decode(cleaned, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CaptureError("Captured image is not valid base64") from e
    else:
        raw = bytes(image)

    if not raw:
        raise CaptureError("No frame available")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise CaptureError("Captured image could not be decoded") from e
    return raw
