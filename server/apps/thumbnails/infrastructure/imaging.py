"""Image resizing with Pillow."""

from io import BytesIO
from typing import Final

from PIL import Image

# Formats that can't store an alpha channel or a palette
_RGB_ONLY_FORMATS: Final = frozenset(('JPEG',))
_FALLBACK_FORMAT: Final = 'PNG'


def resize_to_width(content: bytes, width: int) -> bytes:
    """Resize an image to the given width, keeping its aspect ratio.

    The result is encoded in the format of the source image.

    Args:
        content: Encoded source image.
        width: Target width in pixels.

    Returns:
        Encoded resized image.

    Raises:
        PIL.UnidentifiedImageError: If content is not a readable image.
    """
    with Image.open(BytesIO(content)) as image:
        image_format = image.format or _FALLBACK_FORMAT
        height = max(1, round(image.height * width / image.width))
        resized = image.resize((width, height), Image.Resampling.LANCZOS)

    if image_format in _RGB_ONLY_FORMATS and resized.mode not in {'RGB', 'L'}:
        resized = resized.convert('RGB')

    buffer = BytesIO()
    resized.save(buffer, format=image_format)
    return buffer.getvalue()
