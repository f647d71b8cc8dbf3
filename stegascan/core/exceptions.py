"""Custom exception hierarchy for StegaScan"""


class StegaScanError(Exception):
    """Base exception for all StegaScan errors"""
    pass


class InputError(StegaScanError):
    """Raised when the input buffer or file is empty or unreadable"""

    def __init__(self, message="Input cannot be read", path=None, reason=None):
        if path:
            message = f"{message}: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class MalformedMediaError(StegaScanError):
    """Raised when decoded media is structurally unusable"""

    def __init__(self, message="Malformed media", media_kind=None, details=None):
        super().__init__(message)
        self.media_kind = media_kind
        self.details = details or {}


class EmptyInputError(InputError, MalformedMediaError):
    """Raised on a zero-length byte buffer or an empty sample sequence"""

    def __init__(self, message="Empty input", media_kind=None):
        InputError.__init__(self, message)
        self.media_kind = media_kind
        self.details = {}


class MalformedImageError(MalformedMediaError):
    """Raised when an image has zero width or height"""

    def __init__(self, message="Malformed image", width=None, height=None):
        super().__init__(
            message,
            media_kind="image",
            details={"width": width, "height": height},
        )
        self.width = width
        self.height = height


class DecodeError(StegaScanError):
    """Opaque failure reported by an external codec"""

    def __init__(self, message="Decoding failed", codec=None, cause=None):
        if codec:
            message = f"{codec}: {message}"
        super().__init__(message)
        self.codec = codec
        self.cause = cause


class DependencyMissingError(StegaScanError):
    """Raised when an optional dependency is missing"""

    def __init__(self, dependency, install_hint=None):
        message = f"Missing dependency: {dependency}"
        if install_hint:
            message += f"\n{install_hint}"
        super().__init__(message)
        self.dependency = dependency
        self.install_hint = install_hint


class ConfigurationError(StegaScanError):
    """Raised when configuration is invalid"""
    pass
