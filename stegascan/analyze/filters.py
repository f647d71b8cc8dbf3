"""
Forensic colour filters for still images

Produces ten derived views of an image for visual inspection:
- each RGBA channel isolated against black
- each RGBA channel over a white background
- the image with contrast lowered and raised by the same step

Filters are views only; they do not feed the verdict.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from PIL import Image, ImageEnhance

from stegascan.core.config import BitPlaneConfig, get_config
from stegascan.core.exceptions import MalformedImageError
from stegascan.core.logging import get_logger

logger = get_logger()

BANDS = ("red", "green", "blue", "alpha")


def contrast_factor(step: float) -> float:
    """Percentage step to a Pillow enhance factor, ((100 + step) / 100) ** 2"""
    return ((100.0 + step) / 100.0) ** 2


@dataclass(frozen=True)
class FilterResult:
    width: int
    height: int
    images: Dict[str, Image.Image] = field(default_factory=dict, repr=False, compare=False)

    @property
    def filters_generated(self) -> int:
        return len(self.images)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters_generated": self.filters_generated,
            "filters": list(self.images),
        }


class ImageFilterAnalyzer:
    """Channel isolation and contrast views of a decoded image"""

    def __init__(self, config: Optional[BitPlaneConfig] = None):
        self.config = config or get_config().bitplane

    def analyze(self, image: Image.Image) -> FilterResult:
        width, height = image.size
        if width == 0 or height == 0:
            raise MalformedImageError(
                f"Image has invalid dimensions {width}x{height}",
                width=width,
                height=height,
            )

        rgba = image.convert("RGBA")
        bands = dict(zip(BANDS, rgba.split()))
        black = Image.new("L", rgba.size, 0)
        white = Image.new("L", rgba.size, 255)

        images = {}
        for name in BANDS[:3]:
            images[f"{name}_isolated"] = Image.merge(
                "RGBA", [bands[b] if b == name else black for b in BANDS[:3]] + [white]
            )
        images["alpha_isolated"] = Image.merge("RGBA", (black, black, black, bands["alpha"]))

        for name in BANDS:
            images[f"{name}_on_white"] = Image.merge(
                "RGBA", [bands[b] if b == name else white for b in BANDS]
            )

        step = self.config.filter_contrast
        enhancer = ImageEnhance.Contrast(rgba)
        images["contrast_down"] = enhancer.enhance(contrast_factor(-step))
        images["contrast_up"] = enhancer.enhance(contrast_factor(step))

        logger.debug(f"Generated {len(images)} filter views for {width}x{height} image")

        return FilterResult(width=width, height=height, images=images)


def apply_filters(image: Image.Image, config: Optional[BitPlaneConfig] = None) -> FilterResult:
    """Convenience function to build all filter views of an image"""
    return ImageFilterAnalyzer(config=config).analyze(image)
