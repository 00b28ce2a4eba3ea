import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from doxie_cli.utils import DoxieCliDecodeException


class DoxieCliImageDecodeException(DoxieCliDecodeException):
    pass


def decode_jpeg(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data), formats=['JPEG'])
        # Image.open is lazy; force decoding so truncated payloads fail here
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DoxieCliImageDecodeException(f'doxie: error decoding image: {e}') from e

    return image


def save_image(image: Image.Image, path: Path) -> None:
    image.save(path, format='JPEG')
