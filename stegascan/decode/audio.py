"""Audio decoding to mono floating-point samples"""

from pathlib import Path
from typing import Tuple, Union

import numpy as np
from scipy.io import wavfile

try:
    import soundfile as sf
except (ImportError, OSError):
    sf = None

from stegascan.core.exceptions import DecodeError
from stegascan.core.logging import get_logger

logger = get_logger()


def to_mono_float(data: np.ndarray) -> np.ndarray:
    """Scale integer PCM into [-1, 1] and average channels"""
    if np.issubdtype(data.dtype, np.unsignedinteger):
        half = float(2 ** (data.dtype.itemsize * 8 - 1))
        samples = (data.astype(np.float64) - half) / half
    elif np.issubdtype(data.dtype, np.integer):
        samples = data.astype(np.float64) / float(2 ** (data.dtype.itemsize * 8 - 1))
    else:
        samples = data.astype(np.float64)

    if samples.ndim == 2:
        samples = samples.mean(axis=1)
    return samples


def load_audio(path: Union[str, Path]) -> Tuple[np.ndarray, float]:
    """
    Decode an audio file into mono samples and its real sample rate

    Uses soundfile (WAV, FLAC, OGG and MP3 with recent libsndfile) when
    installed, otherwise scipy's WAV reader.

    Raises:
        DecodeError: If the codec rejects the file
    """
    if sf is not None:
        try:
            data, rate = sf.read(str(path), dtype="float64", always_2d=True)
        except (RuntimeError, OSError, TypeError) as e:
            raise DecodeError(str(e), codec="soundfile", cause=e)
        samples = to_mono_float(data)
    else:
        try:
            rate, data = wavfile.read(str(path))
        except (ValueError, OSError) as e:
            raise DecodeError(str(e), codec="scipy.io.wavfile", cause=e)
        samples = to_mono_float(data)

    logger.debug(f"Decoded audio {path}: {len(samples)} samples @ {rate} Hz")
    return samples, float(rate)
