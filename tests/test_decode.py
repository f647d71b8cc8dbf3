"""Tests for image and audio decoding adapters"""

import numpy as np
import pytest
from scipy.io import wavfile

from stegascan.core.exceptions import DecodeError
from stegascan.decode import load_audio, load_image, open_image
from stegascan.decode.audio import to_mono_float


def test_load_image_returns_rgba(png_file):
    pixels = load_image(png_file)
    assert pixels.shape == (64, 64, 4)
    assert pixels.dtype == np.uint8
    assert (pixels[:, :, 3] == 255).all()


def test_open_image_rejects_garbage(tmp_path):
    path = tmp_path / "fake.png"
    path.write_bytes(b"not an image at all")
    with pytest.raises(DecodeError) as exc_info:
        open_image(path)
    assert exc_info.value.codec == "Pillow"


def test_load_audio(wav_file):
    samples, rate = load_audio(wav_file)
    assert rate == 44100.0
    assert samples.ndim == 1
    assert len(samples) == 44100
    assert np.abs(samples).max() <= 1.0


def test_load_stereo_audio_is_downmixed(tmp_path):
    path = tmp_path / "stereo.wav"
    left = np.full(1000, 16384, dtype=np.int16)
    right = np.zeros(1000, dtype=np.int16)
    wavfile.write(str(path), 8000, np.stack([left, right], axis=1))

    samples, rate = load_audio(path)
    assert rate == 8000.0
    assert samples.shape == (1000,)
    assert samples[0] == pytest.approx(0.25)


def test_load_audio_rejects_garbage(tmp_path):
    path = tmp_path / "noise.wav"
    path.write_bytes(b"\x11" * 128)
    with pytest.raises(DecodeError):
        load_audio(path)


def test_to_mono_float_scaling():
    assert to_mono_float(np.array([-32768, 0], dtype=np.int16)).tolist() == [-1.0, 0.0]
    assert to_mono_float(np.array([0, 128], dtype=np.uint8)).tolist() == [-1.0, 0.0]
    assert to_mono_float(np.array([0.5], dtype=np.float32)).tolist() == [0.5]
