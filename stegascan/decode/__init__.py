"""Decoding adapters that turn files into pixel grids, samples and frames"""

from stegascan.decode.image import open_image, load_image
from stegascan.decode.audio import load_audio
from stegascan.decode.video import (
    FrameStream,
    StreamState,
    VideoDecoder,
    OpenCVDecoder,
    open_video,
)

__all__ = [
    'open_image',
    'load_image',
    'load_audio',
    'FrameStream',
    'StreamState',
    'VideoDecoder',
    'OpenCVDecoder',
    'open_video',
]
