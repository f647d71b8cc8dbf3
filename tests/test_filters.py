"""Tests for forensic colour filter views"""

import pytest
from PIL import Image

from stegascan.analyze.filters import ImageFilterAnalyzer, apply_filters, contrast_factor
from stegascan.core.config import BitPlaneConfig
from stegascan.core.exceptions import MalformedImageError


@pytest.fixture
def tinted_image():
    return Image.new("RGBA", (4, 4), (10, 20, 30, 40))


def test_ten_views_in_order(tinted_image):
    result = apply_filters(tinted_image)

    assert result.filters_generated == 10
    assert list(result.images) == [
        "red_isolated",
        "green_isolated",
        "blue_isolated",
        "alpha_isolated",
        "red_on_white",
        "green_on_white",
        "blue_on_white",
        "alpha_on_white",
        "contrast_down",
        "contrast_up",
    ]
    assert all(img.size == (4, 4) and img.mode == "RGBA" for img in result.images.values())


@pytest.mark.parametrize("name,expected", [
    ("red_isolated", (10, 0, 0, 255)),
    ("green_isolated", (0, 20, 0, 255)),
    ("blue_isolated", (0, 0, 30, 255)),
    ("alpha_isolated", (0, 0, 0, 40)),
    ("red_on_white", (10, 255, 255, 255)),
    ("green_on_white", (255, 20, 255, 255)),
    ("blue_on_white", (255, 255, 30, 255)),
    ("alpha_on_white", (255, 255, 255, 40)),
])
def test_channel_isolation(tinted_image, name, expected):
    assert apply_filters(tinted_image).images[name].getpixel((2, 1)) == expected


def test_rgb_input_gets_opaque_alpha():
    result = apply_filters(Image.new("RGB", (2, 2), (1, 2, 3)))
    assert result.images["alpha_isolated"].getpixel((0, 0)) == (0, 0, 0, 255)


def test_contrast_views_move_away_from_and_toward_the_mean():
    image = Image.new("RGB", (8, 8), (50, 50, 50))
    image.paste((150, 150, 150), (4, 0, 8, 8))
    result = apply_filters(image)

    assert result.images["contrast_up"].getpixel((0, 0))[0] < 50
    assert result.images["contrast_up"].getpixel((7, 0))[0] > 150
    assert 50 < result.images["contrast_down"].getpixel((0, 0))[0] < 100
    assert 100 < result.images["contrast_down"].getpixel((7, 0))[0] < 150


def test_contrast_step_is_configurable():
    image = Image.new("RGB", (8, 8), (50, 50, 50))
    image.paste((150, 150, 150), (4, 0, 8, 8))
    mild = ImageFilterAnalyzer(BitPlaneConfig(filter_contrast=10.0)).analyze(image)
    strong = ImageFilterAnalyzer(BitPlaneConfig(filter_contrast=50.0)).analyze(image)

    assert strong.images["contrast_up"].getpixel((0, 0))[0] < mild.images["contrast_up"].getpixel((0, 0))[0]


def test_contrast_factor():
    assert contrast_factor(0.0) == 1.0
    assert contrast_factor(10.0) == pytest.approx(1.21)
    assert contrast_factor(-10.0) == pytest.approx(0.81)


def test_zero_dimension_rejected():
    with pytest.raises(MalformedImageError):
        apply_filters(Image.new("RGB", (0, 3)))


def test_to_dict_lists_names_only(tinted_image):
    report = apply_filters(tinted_image).to_dict()
    assert report["filters_generated"] == 10
    assert report["filters"][0] == "red_isolated"
