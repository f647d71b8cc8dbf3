"""
StegaScan - Forensic heuristics for steganography detection
"""

__version__ = "0.1.0"
__author__ = "StegaScan Contributors"

from stegascan.core.exceptions import (
    StegaScanError,
    InputError,
    EmptyInputError,
    MalformedMediaError,
    MalformedImageError,
    DecodeError,
    DependencyMissingError,
)
from stegascan.pipeline import AnalysisReport, analyze_file

__all__ = [
    "AnalysisReport",
    "analyze_file",
    "StegaScanError",
    "InputError",
    "EmptyInputError",
    "MalformedMediaError",
    "MalformedImageError",
    "DecodeError",
    "DependencyMissingError",
]
