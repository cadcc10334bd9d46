"""Error taxonomy for world file parsing, loading and inversion."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    """Kind of failure reported by a :class:`WorldFileError`."""

    MALFORMED_INPUT = "malformed_input"
    UNREADABLE_SOURCE = "unreadable_source"
    DEGENERATE_TRANSFORM = "degenerate_transform"


class WorldFileError(Exception):
    """Base class for all world file errors.

    Attributes:
        kind: Which of the three failure kinds this error represents.
    """

    kind: ErrorKind


class MalformedWorldFileError(WorldFileError, ValueError):
    """Text content is not a valid world file.

    Raised for a wrong line count, a line that is not a plain decimal number,
    or a value that is not finite.

    Attributes:
        line_number: 1-based line that failed, or None when the failure is not
            tied to a single line (e.g. too few lines).
    """

    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


class UnreadableWorldFileError(WorldFileError):
    """The world file content could not be read from its source.

    Attributes:
        path: Path that could not be read, or None for stream sources.
    """

    kind = ErrorKind.UNREADABLE_SOURCE

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class DegenerateTransformError(WorldFileError, ArithmeticError):
    """The transform's linear part is singular, so it has no inverse.

    Attributes:
        determinant: Determinant ``a*e - b*d`` of the linear part.
    """

    kind = ErrorKind.DEGENERATE_TRANSFORM

    def __init__(self, message: str, determinant: float) -> None:
        super().__init__(message)
        self.determinant = determinant
