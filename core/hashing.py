# core/hashing.py

import imagehash
from PIL import Image
from dataclasses import dataclass
from typing import Tuple

from core.exceptions import ConfigurationError, ImageDecodeError

Dimensions = Tuple[int, int]

DEFAULT_RESOLUTION = 10

# imagehash cannot build a grid smaller than 2x2
MIN_RESOLUTION = 2


@dataclass(frozen=True)
class HashConfig:
    """
    Run-wide hashing configuration.

    Hashes produced under different configurations are not comparable, so a
    single instance is threaded through the builder and every worker.
    """
    resolution: int = DEFAULT_RESOLUTION
    use_dct: bool = True

    def __post_init__(self):
        if isinstance(self.resolution, bool) or not isinstance(self.resolution, int):
            raise ConfigurationError(
                f"resolution must be an integer, got {self.resolution!r}"
            )
        if self.resolution < MIN_RESOLUTION:
            raise ConfigurationError(
                f"resolution must be at least {MIN_RESOLUTION}, got {self.resolution}"
            )

    @property
    def hash_bits(self) -> int:
        return self.resolution * self.resolution

    def build(self) -> 'ImageHasher':
        return ImageHasher(self)


class ImageHasher:
    """
    Reusable perceptual hasher bound to one HashConfig.

    DCT mode uses imagehash.phash; spatial mode uses the gradient hash
    (imagehash.dhash). Both produce resolution x resolution bits.
    """

    def __init__(self, config: HashConfig):
        self.config = config
        if config.use_dct:
            self._hash_func = imagehash.phash
        else:
            self._hash_func = imagehash.dhash

    def hash(self, image: Image.Image) -> imagehash.ImageHash:
        return self._hash_func(image, hash_size=self.config.resolution)

    def __repr__(self):
        mode = "dct" if self.config.use_dct else "spatial"
        return f"ImageHasher(resolution={self.config.resolution}, mode={mode})"


def build_hasher(resolution: int = DEFAULT_RESOLUTION,
                 use_dct: bool = True) -> ImageHasher:
    """Build a hasher; raises ConfigurationError for a bad resolution"""
    return HashConfig(resolution=resolution, use_dct=use_dct).build()


def hash_one(hasher: ImageHasher,
             path: str) -> Tuple[Dimensions, imagehash.ImageHash]:
    """
    Decode a single image and hash its full pixel buffer.

    Returns:
        ((width, height), hash)

    Raises:
        ImageDecodeError: the file could not be opened or decoded
    """
    try:
        with Image.open(path) as img:
            img.load()
            dimensions = img.size
            image_hash = hasher.hash(img)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        # UnidentifiedImageError and truncated data are OSError subclasses;
        # some broken PNG chunks surface as SyntaxError
        raise ImageDecodeError(str(path), str(e)) from e

    return dimensions, image_hash
