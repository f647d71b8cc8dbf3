"""Image decoding via Pillow"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from stegascan.core.exceptions import DecodeError
from stegascan.core.logging import get_logger

logger = get_logger()


def open_image(path: Union[str, Path]) -> Image.Image:
    """Open and fully decode an image, keeping its metadata"""
    try:
        img = Image.open(path)
        img.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(str(e), codec="Pillow", cause=e)

    logger.debug(f"Decoded image {path}: {img.format} {img.mode} {img.size[0]}x{img.size[1]}")
    return img


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Decode an image into an H x W x 4 uint8 RGBA array"""
    with open_image(path) as img:
        return np.asarray(img.convert("RGBA"), dtype=np.uint8)
