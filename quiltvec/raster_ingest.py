"""Raster image ingestion into RGBA pixel buffers."""
import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Tuple, Union
from urllib.parse import unquote_to_bytes

import numpy as np
from PIL import Image
from PIL import ImageOps

from quiltvec.types import ImageDecodeError, PixelBuffer, RenderContextUnavailable

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes]


def decode_data_url(data_url: str) -> bytes:
    """
    Decode the payload of a ``data:`` URL.

    Args:
        data_url: URL of the form ``data:[<mediatype>][;base64],<data>``

    Returns:
        Raw payload bytes

    Raises:
        ImageDecodeError: If the URL is malformed or the payload is not valid base64
    """
    if not data_url.startswith("data:"):
        raise ImageDecodeError("Not a data URL")

    header, sep, payload = data_url[5:].partition(",")
    if not sep:
        raise ImageDecodeError("Data URL has no payload separator")

    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"Invalid base64 payload in data URL: {e}") from e

    return unquote_to_bytes(payload)


def _open_image(source: ImageSource) -> Image.Image:
    """Open a PIL image from a path, raw bytes or data URL."""
    if isinstance(source, bytes):
        stream = io.BytesIO(source)
        label = "<bytes>"
    elif isinstance(source, str) and source.startswith("data:"):
        stream = io.BytesIO(decode_data_url(source))
        label = "<data URL>"
    else:
        path = Path(source)
        try:
            exists = path.exists()
            is_file = path.is_file()
        except OSError as e:
            raise ImageDecodeError(f"Source is neither a data URL nor a usable path: {e}") from e
        if not exists:
            raise FileNotFoundError(f"Image file not found: {path}")
        if not is_file:
            raise ImageDecodeError(f"Path is not a file: {path}")
        stream = path
        label = str(path)

    try:
        img = Image.open(stream)
        img.load()
        return img
    except (IOError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Failed to decode image {label}: {e}") from e


def pixel_buffer_from_image(img: Image.Image) -> PixelBuffer:
    """
    Convert a PIL image to an RGBA pixel buffer.

    EXIF orientation is applied before conversion so the buffer matches
    what a viewer displays.

    Raises:
        RenderContextUnavailable: If the image has no pixels or cannot be converted
    """
    width, height = img.size
    if width == 0 or height == 0:
        raise RenderContextUnavailable(f"Image has no pixels ({width}x{height})")

    try:
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        data = np.array(img, dtype=np.uint8)
    except (OSError, ValueError) as e:
        raise RenderContextUnavailable(f"Could not read image as RGBA: {e}") from e

    return PixelBuffer(data=data)


def pixel_buffer_from_array(image: np.ndarray) -> PixelBuffer:
    """
    Create a PixelBuffer from a numpy array.

    Args:
        image: Array (H, W), (H, W, 3) or (H, W, 4). Integer arrays are taken
            as 0-255 samples; float arrays as 0-1 samples.

    Returns:
        PixelBuffer with opaque alpha added where the input had none
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - replicate into RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise RenderContextUnavailable(f"Unsupported pixel array shape {image.shape}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise RenderContextUnavailable("Pixel array has no pixels")

    if image.dtype == bool:
        image = image.astype(np.uint8) * 255
    elif np.issubdtype(image.dtype, np.floating):
        image = np.clip(np.rint(image * 255.0), 0, 255).astype(np.uint8)
    elif np.issubdtype(image.dtype, np.integer):
        image = np.clip(image, 0, 255).astype(np.uint8)
    else:
        raise RenderContextUnavailable(f"Unsupported pixel dtype {image.dtype}")

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=2)

    return PixelBuffer(data=np.ascontiguousarray(image))


def load_pixel_buffer(source: ImageSource) -> PixelBuffer:
    """
    Decode an image into an RGBA pixel buffer.

    Args:
        source: File path, raw encoded bytes, or ``data:`` URL

    Returns:
        PixelBuffer

    Raises:
        FileNotFoundError: If a path source doesn't exist
        ImageDecodeError: If the data cannot be decoded
        RenderContextUnavailable: If the decoded image has no readable pixels
    """
    with _open_image(source) as img:
        buffer = pixel_buffer_from_image(img)

    logger.debug(f"Decoded image {buffer.width}x{buffer.height}")
    return buffer


def image_dimensions(source: ImageSource) -> Tuple[int, int]:
    """Return ``(width, height)`` of an image without converting its pixels."""
    with _open_image(source) as img:
        return img.size
