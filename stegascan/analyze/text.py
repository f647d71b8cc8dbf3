"""Basic statistics for text-like files"""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class TextStatistics:
    file_type: str
    line_count: int
    word_count: int
    char_count: int
    byte_size: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def text_statistics(data: bytes, file_type: str = "txt") -> TextStatistics:
    content = data.decode("utf-8", errors="replace")
    return TextStatistics(
        file_type=file_type,
        line_count=len(content.splitlines()),
        word_count=len(content.split()),
        char_count=len(content),
        byte_size=len(data),
    )
