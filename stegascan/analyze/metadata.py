"""
Metadata suspicion checks

Only length and encoding checks are performed: oversized tag values,
base64-looking payloads, embedded thumbnails, pictures and private ID3
frames. Full metadata extraction is left to dedicated tools.
"""

import string
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PIL import ExifTags, Image

try:
    from mutagen.id3 import ID3, ID3NoHeaderError
    from mutagen import MutagenError
except ImportError:
    ID3 = None

from stegascan.core.config import MetadataConfig, get_config
from stegascan.core.dependencies import require_dependency
from stegascan.core.exceptions import DecodeError
from stegascan.core.logging import get_logger

logger = get_logger()

if ID3 is None:
    logger.debug("mutagen not installed; ID3 checks unavailable")

BASE64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/=")

COMMENT_TAGS = {"UserComment", "ImageDescription"}

THUMBNAIL_OFFSET_TAG = 0x0201
THUMBNAIL_LENGTH_TAG = 0x0202


def is_potential_base64(text: str) -> bool:
    """More than 90% of the characters belong to the base64 alphabet"""
    if len(text) < 4:
        return False
    hits = sum(1 for c in text if c in BASE64_ALPHABET)
    return hits / len(text) > 0.9


@dataclass(frozen=True)
class MetadataReport:
    source: str
    fields_found: Dict[str, str] = field(default_factory=dict)
    comment_fields: List[str] = field(default_factory=list)
    suspicious_fields: List[str] = field(default_factory=list)
    has_thumbnail: bool = False
    thumbnail_size: Optional[int] = None

    @property
    def suspicious(self) -> bool:
        return bool(self.suspicious_fields)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _display_value(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").strip("\x00").strip()
    return str(value)


def _exif_tag_name(tag: int) -> str:
    return ExifTags.TAGS.get(tag, f"Tag0x{tag:04X}")


def check_exif(
    image: Union[Image.Image, str, Path],
    config: Optional[MetadataConfig] = None,
) -> MetadataReport:
    """Flag oversized or encoded-looking EXIF values"""
    cfg = config or get_config().metadata

    if isinstance(image, Image.Image):
        exif = image.getexif()
    else:
        try:
            with Image.open(image) as img:
                exif = img.getexif()
        except OSError as e:
            raise DecodeError(str(e), codec="Pillow", cause=e)

    entries = dict(exif.items())
    entries.update(exif.get_ifd(ExifTags.IFD.Exif))

    fields_found = {}
    comments = []
    suspicious = []

    for tag, raw in entries.items():
        name = _exif_tag_name(tag)
        value = _display_value(raw)
        fields_found[name] = value

        if name in COMMENT_TAGS:
            comments.append(f"{name}: {value}")

        if len(value) > cfg.max_exif_value_length:
            suspicious.append(f"{name}: unusually large ({len(value)}+ bytes)")

        if len(value) > cfg.min_encoded_length and is_potential_base64(value):
            suspicious.append(f"{name}: potential encoded data")

    thumbnail = exif.get_ifd(ExifTags.IFD.IFD1)
    has_thumbnail = THUMBNAIL_OFFSET_TAG in thumbnail
    thumbnail_size = None
    if has_thumbnail and THUMBNAIL_LENGTH_TAG in thumbnail:
        thumbnail_size = int(thumbnail[THUMBNAIL_LENGTH_TAG])

    logger.debug(f"EXIF: {len(fields_found)} fields, {len(suspicious)} suspicious")

    return MetadataReport(
        source="exif",
        fields_found=fields_found,
        comment_fields=comments,
        suspicious_fields=suspicious,
        has_thumbnail=has_thumbnail,
        thumbnail_size=thumbnail_size,
    )


def check_id3(
    path: Union[str, Path],
    config: Optional[MetadataConfig] = None,
) -> Optional[MetadataReport]:
    """Flag oversized comments, lyrics, pictures and private frames in an ID3 tag

    Returns None when the file carries no ID3 tag.
    """
    require_dependency("mutagen", "ID3 metadata checks")
    cfg = config or get_config().metadata

    try:
        tags = ID3(str(path))
    except ID3NoHeaderError:
        return None
    except MutagenError as e:
        raise DecodeError(str(e), codec="mutagen", cause=e)

    fields_found = {}
    comments = []
    suspicious = []

    for frame in tags.values():
        fields_found[frame.HashKey] = frame.pprint()[:200]

    for frame in tags.getall("COMM"):
        text = "\n".join(str(t) for t in frame.text)
        comments.append(f"{frame.lang} [{frame.desc}]: {text}")
        if len(text) > cfg.max_comment_length:
            suspicious.append(f"Large comment field: {len(text)} bytes")
        if len(text) > cfg.min_encoded_length and is_potential_base64(text):
            suspicious.append("Comment contains potential encoded data")

    lyrics = tags.getall("USLT")
    if lyrics:
        text = str(lyrics[0].text)
        if len(text) > cfg.max_lyrics_length:
            suspicious.append(f"Unusually large lyrics: {len(text)} bytes")

    pictures = tags.getall("APIC")
    for picture in pictures:
        if len(picture.data) > cfg.max_picture_bytes:
            suspicious.append(f"Large embedded picture: {len(picture.data) // 1_000_000} MB")

    for private in tags.getall("PRIV"):
        if len(private.data) > cfg.max_private_frame_bytes:
            suspicious.append(f"Large private frame: ~{len(private.data)} bytes")

    return MetadataReport(
        source="id3",
        fields_found=fields_found,
        comment_fields=comments,
        suspicious_fields=suspicious,
        has_thumbnail=bool(pictures),
        thumbnail_size=len(pictures[0].data) if pictures else None,
    )
