"""
Image Data Value Object

The undecoded photo exactly as the capture side delivered it.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
from pathlib import Path
import base64
import binascii

from ..exceptions import ImageLoadError


SUFFIX_FORMATS = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".bmp": "bmp",
    ".webp": "webp",
    ".tif": "tiff",
    ".tiff": "tiff",
}


def _split_data_url(text: str) -> Tuple[Optional[str], str]:
    """Return (format, payload) for ``data:image/png;base64,...`` strings."""
    if not text.startswith("data:"):
        return None, text
    header, comma, payload = text.partition(",")
    if not comma:
        raise ImageLoadError("Malformed data URL: no comma before the payload")
    media_type = header[len("data:"):].split(";")[0]
    fmt = media_type.split("/", 1)[1] if media_type.startswith("image/") else None
    return fmt, payload


@dataclass(frozen=True)
class ImageData:
    """
    Encoded image bytes plus where they came from.

    The payload is either raw bytes or base64 text. Base64 is decoded each
    time ``bytes`` is read; with no payload, ``source`` is read from disk.

    Attributes:
        source: File path or upload name, if known
        format: Format hint such as "jpeg" or "png"
        payload: Raw bytes or base64 text
    """

    source: Optional[str] = None
    format: Optional[str] = None
    payload: Union[bytes, str, None] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.payload is None and self.source is None:
            raise ValueError("ImageData needs a payload or a source path")

    @property
    def bytes(self) -> bytes:
        """
        Raw encoded bytes.

        Raises:
            ImageLoadError: Base64 payload is malformed or the source file is gone
        """
        if isinstance(self.payload, bytes):
            return self.payload

        if isinstance(self.payload, str):
            try:
                return base64.b64decode(self.payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ImageLoadError(f"Invalid base64 image data: {e}")

        path = Path(self.source)
        if not path.is_file():
            raise ImageLoadError(f"Image file not found: {self.source}")
        return path.read_bytes()

    def __len__(self) -> int:
        return len(self.bytes)

    def __str__(self) -> str:
        return f"ImageData({self.source or 'memory'}, {self.format or 'unknown format'})"

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "ImageData":
        """Read a photo from disk; the format comes from the file suffix."""
        path = Path(file_path)
        if not path.is_file():
            raise ImageLoadError(f"Image file not found: {file_path}")
        return cls(
            source=str(path.absolute()),
            format=SUFFIX_FORMATS.get(path.suffix.lower()),
            payload=path.read_bytes()
        )

    @classmethod
    def from_bytes(cls, data: bytes, format: Optional[str] = None, source: Optional[str] = None) -> "ImageData":
        return cls(source=source, format=format, payload=bytes(data))

    @classmethod
    def from_base64(cls, base64_string: str, format: Optional[str] = None, source: Optional[str] = None) -> "ImageData":
        """
        Wrap base64 text, with or without a browser data URL header.

        Args:
            base64_string: Payload, optionally ``data:image/<fmt>;base64,`` prefixed
            format: Format hint; a data URL header takes precedence
            source: Optional source identifier
        """
        url_format, payload = _split_data_url(base64_string)
        return cls(source=source, format=url_format or format, payload=payload.strip())

    @classmethod
    def coerce(cls, image: Union["ImageData", bytes, bytearray, str]) -> "ImageData":
        """Accept whatever the capture collaborator hands over."""
        if isinstance(image, ImageData):
            return image
        if isinstance(image, (bytes, bytearray)):
            return cls.from_bytes(image)
        if isinstance(image, str):
            return cls.from_base64(image)
        raise ImageLoadError(f"Unsupported image source type: {type(image).__name__}")
