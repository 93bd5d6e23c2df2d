"""Image resizing and transport encoding for recognition requests."""

import base64
import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

_logger = logging.getLogger(__name__)

_REENCODE_FORMATS = {"PNG": "PNG", "WEBP": "WEBP"}


@dataclass
class ImageCodec:
    """Best-effort downscaling that bounds request payload size."""

    max_size: int = 800
    compact_max_size: int = 600
    quality: int = 80
    bypass_bytes: int = 500 * 1024

    def target_size(self, *, constrained: bool = False) -> int:
        """Return the bounding box edge for the current viewport."""
        return self.compact_max_size if constrained else self.max_size

    def compress(self, data: bytes, *, constrained: bool = False) -> bytes:
        """Return a downscaled copy of the image, or the input unchanged.

        Small payloads and images already inside the bounding box are returned
        as-is. Any decode or encode failure also returns the original bytes,
        since resizing is an optimization rather than a requirement.
        """
        if len(data) < self.bypass_bytes:
            return data
        bound = self.target_size(constrained=constrained)
        try:
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                if max(width, height) <= bound:
                    return data
                ratio = min(bound / width, bound / height)
                new_size = (
                    max(1, int(width * ratio)),
                    max(1, int(height * ratio)),
                )
                source_format = (image.format or "").upper()
                resized = image.resize(new_size, Image.Resampling.LANCZOS)
                return self._encode(resized, source_format)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            _logger.warning("Image resize skipped, sending original: %s", exc)
            return data

    def _encode(self, image: Image.Image, source_format: str) -> bytes:
        output_format = _REENCODE_FORMATS.get(source_format, "JPEG")
        if output_format == "JPEG" and image.mode not in {"RGB", "L"}:
            image = image.convert("RGB")
        buffer = io.BytesIO()
        if output_format == "PNG":
            image.save(buffer, format=output_format, optimize=True)
        else:
            image.save(buffer, format=output_format, quality=self.quality)
        return buffer.getvalue()


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def ensure_data_url(encoded: str) -> str:
    """Wrap bare base64 text in a JPEG data URL."""
    if encoded.startswith("data:"):
        return encoded
    return f"data:image/jpeg;base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
