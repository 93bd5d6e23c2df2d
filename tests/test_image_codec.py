"""Tests for image resizing and encoding."""

import io
import os

from PIL import Image

from calorie_snap.services.image_codec import (
    ImageCodec,
    detect_mime_type,
    ensure_data_url,
    to_data_url,
)


def _noisy_image(width: int, height: int, image_format: str = "JPEG") -> bytes:
    image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    buffer = io.BytesIO()
    image.save(buffer, format=image_format, quality=95)
    return buffer.getvalue()


def _size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as image:
        return image.size


def test_large_image_is_scaled_within_bound() -> None:
    data = _noisy_image(1600, 1200)
    codec = ImageCodec(bypass_bytes=0)

    output = codec.compress(data)

    assert max(_size(output)) <= 800
    assert _size(output) == (800, 600)


def test_constrained_viewport_uses_smaller_bound() -> None:
    data = _noisy_image(1200, 1600)
    codec = ImageCodec(bypass_bytes=0)

    output = codec.compress(data, constrained=True)

    assert max(_size(output)) <= 600


def test_image_inside_bound_is_unchanged() -> None:
    data = _noisy_image(640, 480)
    codec = ImageCodec(bypass_bytes=0)

    assert codec.compress(data) is data


def test_small_payload_bypasses_resizing() -> None:
    data = _noisy_image(1600, 1200)
    codec = ImageCodec(bypass_bytes=len(data) + 1)

    assert codec.compress(data) is data


def test_undecodable_input_is_returned_unchanged() -> None:
    data = b"not an image" * 100
    codec = ImageCodec(bypass_bytes=0)

    assert codec.compress(data) is data


def test_png_stays_png() -> None:
    data = _noisy_image(1000, 500, image_format="PNG")
    codec = ImageCodec(bypass_bytes=0)

    output = codec.compress(data)

    assert detect_mime_type(output) == "image/png"
    assert _size(output) == (800, 400)


def test_to_data_url_uses_png_header() -> None:
    data = b"\x89PNG\r\n\x1a\n" + b"rest"

    assert to_data_url(data).startswith("data:image/png;base64,")


def test_to_data_url_defaults_to_jpeg() -> None:
    assert to_data_url(b"unknown").startswith("data:image/jpeg;base64,")


def test_ensure_data_url_wraps_bare_base64() -> None:
    assert ensure_data_url("ZmFrZQ==") == "data:image/jpeg;base64,ZmFrZQ=="
    assert ensure_data_url("data:image/png;base64,eA==") == "data:image/png;base64,eA=="
