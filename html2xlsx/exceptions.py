"""Package-specific exception types."""

from __future__ import annotations


class ConversionError(ValueError):
    """Base class for conversion-related errors.

    Malformed markup never raises; these errors signal misuse of the API.
    """


class TargetCellError(ConversionError):
    """Raised when the cell receiving converted content is unusable.

    Args:
        reason: Why the cell cannot receive content.
        coordinate: Cell coordinate, when known.
    """

    def __init__(self, reason: str, coordinate: str | None = None):
        self.reason = reason
        self.coordinate = coordinate
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.coordinate is None:
            return f"Invalid target cell: {self.reason}"
        return f"Invalid target cell {self.coordinate}: {self.reason}"


class ImageDownloadError(ConversionError):
    """Raised when an image referenced by the markup cannot be fetched.

    Args:
        source: The ``src`` value of the image.
        detail: Description of the underlying failure.
    """

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Failed to download image from {source}: {detail}")
