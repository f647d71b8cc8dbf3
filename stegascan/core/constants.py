"""Shared constants for StegaScan"""

from enum import Enum


class Category(Enum):
    IMAGE = "Image"
    AUDIO = "Audio"
    VIDEO = "Video"
    DOCUMENT = "Document"
    ARCHIVE = "Archive"
    EXECUTABLE = "Executable"
    OTHER = "Other"


class Confidence(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MediaKind(Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"


UNKNOWN_FORMAT = "UNKNOWN"

DEFAULT_ALIGNMENT_BOUNDARIES = (512, 1024)
DEFAULT_PADDING_LENGTH = 4

DEFAULT_CHI_SQUARE_THRESHOLD = 100.0
DEFAULT_ENTROPY_THRESHOLD = 0.9
DEFAULT_FILTER_CONTRAST = 10.0

DEFAULT_WINDOW_SIZE = 2048
DEFAULT_HOP_SIZE = 512
DEFAULT_SAMPLE_RATE = 44100.0
DEFAULT_HIGH_FREQUENCY_CUTOFF = 15000.0
DEFAULT_HIGH_FREQUENCY_RATIO = 0.1
DEFAULT_TONE_MAGNITUDE = 0.5
DEFAULT_EDGE_DELTA = 0.3
DEFAULT_EDGE_DENSITY_DIVISOR = 20
DEFAULT_SPIKE_MULTIPLIER = 5.0
DEFAULT_SPIKE_FRAME_DIVISOR = 10

DEFAULT_VIDEO_SAMPLE_EVERY = 30
DEFAULT_HISTOGRAM_PEAK_MULTIPLIER = 10.0
DEFAULT_HISTOGRAM_PAIR_MULTIPLIER = 3.0
DEFAULT_EDGE_GRADIENT_THRESHOLD = 30.0

DEFAULT_HIGH_INDICATOR_COUNT = 3
DEFAULT_MEDIUM_INDICATOR_COUNT = 1

DEFAULT_MAX_EXIF_VALUE_LENGTH = 1000
DEFAULT_MAX_COMMENT_LENGTH = 500
DEFAULT_MAX_LYRICS_LENGTH = 10000
DEFAULT_MAX_PICTURE_BYTES = 5_000_000
DEFAULT_MAX_PRIVATE_FRAME_BYTES = 1000
DEFAULT_MIN_ENCODED_LENGTH = 50

# Indicator strings, in the order the aggregator emits them
INDICATOR_SUSPICIOUS_STRUCTURE = "Suspicious data found in file structure"
INDICATOR_MULTIPLE_FORMATS = "Multiple file formats detected"
INDICATOR_LSB = "LSB analysis indicates possible hidden data"
INDICATOR_SPECTROGRAM = "Spectrogram analysis detected hidden patterns"
INDICATOR_VIDEO_FRAMES = "{count} suspicious video frames found"
INDICATOR_METADATA_PREFIX = "Metadata: "

POLYGLOT_FINDING = (
    "POLYGLOT FILE DETECTED: Contains multiple media types "
    "(possible steganography)"
)
MISMATCH_FINDING = (
    "Format mismatch: extension says {expected}, detected format is {primary}"
)

RECOMMENDATIONS_DETECTED = [
    "Further investigation recommended",
    "Consider specialized tools",
    "Verify file source",
]
RECOMMENDATIONS_CLEAN = [
    "No obvious steganography detected",
]

EXTENSION_ALIASES = {
    "JPG": "JPEG",
    "JPE": "JPEG",
    "JFIF": "JPEG",
    "TIF": "TIFF",
    "HTM": "HTML",
}

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "jpe", "jfif", "gif", "bmp", "tiff", "tif", "webp"}
AUDIO_EXTENSIONS = {"mp3", "wav", "flac", "ogg", "aac", "wma", "m4a"}
VIDEO_EXTENSIONS = {"mp4", "avi", "mkv", "webm", "mov", "m4v"}

PYTHON_PACKAGES = {
    "click": {
        "name": "click",
        "required": True,
        "install": "pip install click>=8.1.0",
    },
    "rich": {
        "name": "rich",
        "required": True,
        "install": "pip install rich>=13.0.0",
    },
    "numpy": {
        "name": "numpy",
        "required": True,
        "install": "pip install numpy>=1.24.0",
    },
    "Pillow": {
        "name": "Pillow",
        "import_name": "PIL",
        "required": True,
        "install": "pip install Pillow>=10.0.0",
        "features": ["image decoding", "bit-plane visualization", "EXIF checks"],
    },
    "scipy": {
        "name": "scipy",
        "required": True,
        "install": "pip install scipy>=1.10.0",
        "features": ["FFT", "WAV decoding"],
    },
    "soundfile": {
        "name": "soundfile",
        "required": False,
        "install": "pip install soundfile>=0.12.0",
        "features": ["FLAC/OGG audio decoding"],
    },
    "opencv-python-headless": {
        "name": "opencv-python-headless",
        "import_name": "cv2",
        "required": False,
        "install": "pip install opencv-python-headless>=4.8.0",
        "features": ["video frame sampling"],
    },
    "mutagen": {
        "name": "mutagen",
        "required": False,
        "install": "pip install mutagen>=1.47.0",
        "features": ["ID3 metadata checks"],
    },
}
