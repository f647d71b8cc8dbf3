"""Shared fixtures for stegascan tests"""

import io

import numpy as np
import pytest
from PIL import Image
from scipy.io import wavfile

from stegascan.core.config import Config, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration"""
    config = Config.default()
    set_config(config)
    yield config
    set_config(Config.default())


@pytest.fixture
def event_log():
    events = []
    return events


@pytest.fixture
def png_bytes():
    """Small solid-colour PNG"""
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), (200, 40, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def smooth_image():
    """Gradient image with even LSBs everywhere"""
    x = np.arange(64, dtype=np.uint8) * 2
    rgb = np.dstack(list(np.meshgrid(x, x)) + [np.full((64, 64), 100, dtype=np.uint8)])
    return Image.fromarray(rgb.astype(np.uint8))


@pytest.fixture
def noisy_image():
    """Uniformly random pixels, so LSBs look like an encrypted payload"""
    rng = np.random.default_rng(1234)
    return Image.fromarray(rng.integers(0, 256, (64, 64, 3), dtype=np.uint8))


@pytest.fixture
def sine_samples():
    rate = 44100
    t = np.arange(rate) / rate
    return 0.5 * np.sin(2 * np.pi * 440.0 * t), rate


@pytest.fixture
def wav_file(tmp_path, sine_samples):
    samples, rate = sine_samples
    path = tmp_path / "tone.wav"
    wavfile.write(str(path), rate, (samples * 32767).astype(np.int16))
    return path


@pytest.fixture
def png_file(tmp_path, smooth_image):
    path = tmp_path / "gradient.png"
    smooth_image.save(path)
    return path
