"""
World file model: parsing, serialization and pixel/world point mapping.

A world file is a six-line sidecar of a raster image holding the affine
transform from pixel coordinates to an external planar coordinate system.
The lines are, in order:

    a  pixel size in the x direction
    d  row rotation
    b  column rotation
    e  pixel size in the y direction (typically negative)
    c  x coordinate of the centre of the upper-left pixel
    f  y coordinate of the centre of the upper-left pixel

The forward transform is:
    x = a*col + b*row + c
    y = d*col + e*row + f

World files carry no spatial reference system; world coordinates are an
opaque planar pair.

References:
    - https://en.wikipedia.org/wiki/World_file
    - https://support.esri.com/en/technical-article/000002860
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Protocol

import numpy as np
import numpy.typing as npt

from worldfile.config import DEFAULT_SINGULAR_TOLERANCE, WorldFileConfig, get_default_config
from worldfile.errors import (
    DegenerateTransformError,
    MalformedWorldFileError,
    UnreadableWorldFileError,
)
from worldfile.types import Coefficients, PixelCoordinate, WorldCoordinate

logger = logging.getLogger(__name__)

WORLD_FILE_LINE_COUNT = 6

# Plain decimal notation with ASCII digits: optional sign, digits with optional fraction,
# optional exponent. Narrower than float(), which also accepts "inf", "nan", "1_000"
# and non-ASCII digits.
_NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Only \r\n, \r and \n end a line
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Padding allowed around a value
_PADDING = " \t"

# File line order of the coefficients
_FIELD_NAMES = ("x_scale", "y_skew", "x_skew", "y_scale", "x_coord", "y_coord")


class FileSystem(Protocol):
    """Protocol for file system operations."""

    def read_text(self, path: str | Path, encoding: str) -> str:
        """Read text from a file."""
        ...

    def write_text(self, path: str | Path, content: str, encoding: str) -> None:
        """Write text to a file."""
        ...


class DefaultFileSystem:
    """Default file system implementation."""

    def read_text(self, path: str | Path, encoding: str) -> str:
        """Read text from a file."""
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: str | Path, content: str, encoding: str) -> None:
        """Write text to a file."""
        Path(path).write_text(content, encoding=encoding)


def _get_fs(fs: FileSystem | None) -> FileSystem:
    """Return the provided filesystem or the default."""
    return fs if fs is not None else DefaultFileSystem()


def _parse_value(line: str, line_number: int) -> float:
    """Parse one coefficient line into a finite float."""
    text = line.strip(_PADDING)
    if not text:
        raise MalformedWorldFileError(f"Line {line_number} is empty", line_number)
    if not _NUMBER_PATTERN.fullmatch(text):
        raise MalformedWorldFileError(
            f"Line {line_number} is not a number: {text!r}", line_number
        )
    value = float(text)
    if not math.isfinite(value):
        raise MalformedWorldFileError(
            f"Line {line_number} is not a finite number: {text!r}", line_number
        )
    return value


@dataclass(frozen=True)
class WorldFile:
    """Immutable affine transform read from, or written to, a world file.

    Fields are declared in file line order, so positional construction
    matches the file: ``WorldFile(a, d, b, e, c, f)``.

    Attributes:
        x_scale: ``a``, world x units per pixel column.
        y_skew: ``d``, row rotation term.
        x_skew: ``b``, column rotation term.
        y_scale: ``e``, world y units per pixel row (typically negative).
        x_coord: ``c``, world x of the centre of the upper-left pixel.
        y_coord: ``f``, world y of the centre of the upper-left pixel.
        singular_tolerance: Default tolerance for the world to image
            operations. Taken from ``WorldFileConfig.singular_tolerance`` when
            loaded with a config. Not part of equality or hashing.

    Example:
        >>> w = WorldFile.from_string("32.0\\n0.0\\n0.0\\n-32.0\\n691200.0\\n4576000.0\\n")
        >>> w.image_to_world((171., 343.))
        (696672.0, 4565024.0)
        >>> w.world_to_image((696672., 4565024.))
        (171.0, 343.0)
    """

    x_scale: float
    y_skew: float
    x_skew: float
    y_scale: float
    x_coord: float
    y_coord: float
    singular_tolerance: float = field(
        default=DEFAULT_SINGULAR_TOLERANCE, compare=False, repr=False, kw_only=True
    )

    def __post_init__(self) -> None:
        for name in _FIELD_NAMES:
            raw = getattr(self, name)
            try:
                value = float(raw)
            except (TypeError, ValueError) as e:
                raise MalformedWorldFileError(f"{name} must be a number, got {raw!r}") from e
            if not math.isfinite(value):
                raise MalformedWorldFileError(f"{name} must be finite, got {value}")
            # Frozen dataclass: normalise ints to float without going through __setattr__
            object.__setattr__(self, name, value)

        tolerance = float(self.singular_tolerance)
        if not math.isfinite(tolerance) or tolerance < 0:
            raise ValueError(
                f"singular_tolerance must be finite and non-negative, got {tolerance}"
            )
        object.__setattr__(self, "singular_tolerance", tolerance)

    # --- Construction ---------------------------------------------------

    @classmethod
    def from_coefficients(cls, coefficients: Coefficients) -> WorldFile:
        """Create a WorldFile from six coefficients in file order (a, d, b, e, c, f).

        Raises:
            MalformedWorldFileError: If there are not exactly six values or a
                value is not finite.
        """
        values = tuple(coefficients)
        if len(values) != WORLD_FILE_LINE_COUNT:
            raise MalformedWorldFileError(
                f"Expected {WORLD_FILE_LINE_COUNT} coefficients, got {len(values)}"
            )
        return cls(*values)

    @classmethod
    def from_string(cls, text: str, config: WorldFileConfig | None = None) -> WorldFile:
        """Parse world file text content.

        Trailing blank lines are ignored. The first six lines are read as
        a, d, b, e, c, f.

        Args:
            text: Full text content of a world file.
            config: Parsing options (default: get_default_config()).

        Returns:
            New WorldFile instance.

        Raises:
            MalformedWorldFileError: If the content has the wrong number of
                lines, or a required line is empty, not a plain decimal
                number, or not finite.
        """
        cfg = config if config is not None else get_default_config()

        lines = _LINE_BREAK.split(text)
        while lines and not lines[-1].strip(_PADDING):
            lines.pop()

        if len(lines) < WORLD_FILE_LINE_COUNT:
            logger.debug(f"Rejected world file content with {len(lines)} lines")
            raise MalformedWorldFileError(
                f"Expected {WORLD_FILE_LINE_COUNT} lines, got {len(lines)}"
            )
        if cfg.strict_line_count and len(lines) > WORLD_FILE_LINE_COUNT:
            logger.debug(f"Rejected world file content with {len(lines)} lines")
            raise MalformedWorldFileError(
                f"Expected {WORLD_FILE_LINE_COUNT} lines, got {len(lines)}",
                WORLD_FILE_LINE_COUNT + 1,
            )

        values = [
            _parse_value(line, line_number)
            for line_number, line in enumerate(lines[:WORLD_FILE_LINE_COUNT], start=1)
        ]
        return cls(*values, singular_tolerance=cfg.singular_tolerance)

    @classmethod
    def from_reader(cls, stream: IO, config: WorldFileConfig | None = None) -> WorldFile:
        """Read a world file from an open text or binary stream.

        Args:
            stream: Object with a ``read()`` method. Bytes are decoded with
                ``config.encoding``.
            config: Parsing options (default: get_default_config()).

        Raises:
            UnreadableWorldFileError: If reading the stream fails.
            MalformedWorldFileError: If the content cannot be decoded or parsed.
        """
        cfg = config if config is not None else get_default_config()

        try:
            content = stream.read()
        except OSError as e:
            raise UnreadableWorldFileError(f"Failed to read world file stream: {e}") from e
        except UnicodeDecodeError as e:
            raise MalformedWorldFileError(f"World file stream is not valid text: {e}") from e

        if isinstance(content, (bytes, bytearray)):
            try:
                content = bytes(content).decode(cfg.encoding)
            except UnicodeDecodeError as e:
                raise MalformedWorldFileError(
                    f"World file content is not valid {cfg.encoding}: {e}"
                ) from e

        return cls.from_string(content, cfg)

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        fs: FileSystem | None = None,
        config: WorldFileConfig | None = None,
    ) -> WorldFile:
        """Load a world file from a path.

        Args:
            path: Path to the world file (e.g. ``image.tfw``).
            fs: File system implementation (default: DefaultFileSystem).
            config: Parsing options (default: get_default_config()).

        Returns:
            New WorldFile instance.

        Raises:
            UnreadableWorldFileError: If the file is missing, not a regular
                file, or cannot be read.
            MalformedWorldFileError: If the content cannot be decoded or parsed.
        """
        cfg = config if config is not None else get_default_config()

        try:
            content = _get_fs(fs).read_text(path, cfg.encoding)
        except OSError as e:
            logger.debug(f"Could not read world file {path}: {e}")
            raise UnreadableWorldFileError(
                f"Could not read world file {path}: {e}", path
            ) from e
        except UnicodeDecodeError as e:
            raise MalformedWorldFileError(
                f"World file {path} is not valid {cfg.encoding}: {e}"
            ) from e

        world_file = cls.from_string(content, cfg)
        logger.debug(f"Loaded world file from {path}")
        return world_file

    load = from_path

    # --- Serialization --------------------------------------------------

    def to_string(self) -> str:
        """Return the six-line world file text.

        Values are written with ``repr`` so parsing the text restores the
        exact same floats.
        """
        return "".join(f"{value!r}\n" for value in self.coefficients)

    def __str__(self) -> str:
        return self.to_string()

    def write_to_writer(self, stream: IO[str]) -> None:
        """Write the world file text to an open text stream."""
        stream.write(self.to_string())

    def write_to_path(
        self,
        path: str | Path,
        fs: FileSystem | None = None,
        config: WorldFileConfig | None = None,
    ) -> None:
        """Write the world file text to a path.

        Args:
            path: Output path (e.g. ``image.tfw``).
            fs: File system implementation (default: DefaultFileSystem).
            config: Options supplying the text encoding (default: get_default_config()).

        Raises:
            OSError: If the file cannot be written.
        """
        cfg = config if config is not None else get_default_config()
        _get_fs(fs).write_text(path, self.to_string(), cfg.encoding)
        logger.debug(f"Wrote world file to {path}")

    save = write_to_path

    # --- Coefficients ---------------------------------------------------

    @property
    def coefficients(self) -> Coefficients:
        """Coefficients in file order (a, d, b, e, c, f)."""
        return (self.x_scale, self.y_skew, self.x_skew, self.y_scale, self.x_coord, self.y_coord)

    @property
    def a(self) -> float:
        return self.x_scale

    @property
    def b(self) -> float:
        return self.x_skew

    @property
    def c(self) -> float:
        return self.x_coord

    @property
    def d(self) -> float:
        return self.y_skew

    @property
    def e(self) -> float:
        return self.y_scale

    @property
    def f(self) -> float:
        return self.y_coord

    @property
    def determinant(self) -> float:
        """Determinant ``a*e - b*d`` of the linear part."""
        return self.x_scale * self.y_scale - self.x_skew * self.y_skew

    def is_invertible(self, tolerance: float | None = None) -> bool:
        """Return True if the determinant's magnitude exceeds ``tolerance``.

        ``tolerance`` defaults to the instance's ``singular_tolerance``.
        """
        return abs(self.determinant) > self._resolve_tolerance(tolerance)

    @property
    def matrix(self) -> np.ndarray:
        """3x3 homogeneous matrix mapping [col, row, 1] to [x, y, 1]."""
        return np.array(
            [
                [self.x_scale, self.x_skew, self.x_coord],
                [self.y_skew, self.y_scale, self.y_coord],
                [0.0, 0.0, 1.0],
            ],
            dtype=np.float64,
        )

    def _resolve_tolerance(self, tolerance: float | None) -> float:
        return self.singular_tolerance if tolerance is None else tolerance

    def _checked_determinant(self, tolerance: float | None) -> float:
        tolerance = self._resolve_tolerance(tolerance)
        det = self.determinant
        if not math.isfinite(det):
            raise DegenerateTransformError(
                f"World file determinant overflowed ({det!r}); world to image mapping is undefined",
                det,
            )
        if abs(det) <= tolerance:
            if det != 0.0:
                logger.warning(
                    f"World file determinant {det:.3e} is within singular tolerance {tolerance:.3e}"
                )
            raise DegenerateTransformError(
                f"World file transform is singular (determinant {det!r}); "
                f"world to image mapping is undefined",
                det,
            )
        return det

    # --- Point mapping --------------------------------------------------

    def image_to_world(self, image_x_y: PixelCoordinate) -> WorldCoordinate:
        """Convert a (col, row) pixel coordinate to world coordinates.

        Pixel coordinates can be fractional. Always succeeds.
        """
        col, row = image_x_y
        return (
            self.x_scale * col + self.x_skew * row + self.x_coord,
            self.y_skew * col + self.y_scale * row + self.y_coord,
        )

    def world_to_image(
        self,
        world_x_y: WorldCoordinate,
        tolerance: float | None = None,
    ) -> PixelCoordinate:
        """Convert a world (x, y) coordinate to a fractional (col, row) pixel coordinate.

        Solves the 2x2 linear system with the closed-form inverse.

        Args:
            world_x_y: World coordinate pair.
            tolerance: Determinants with magnitude at or below this are
                treated as singular (default: the instance's
                ``singular_tolerance``, normally 0.0 so only exactly zero).

        Raises:
            DegenerateTransformError: If the transform is singular, or if the
                result overflows float range (the error then carries the
                non-zero determinant).
        """
        det = self._checked_determinant(tolerance)
        x, y = world_x_y
        dx = x - self.x_coord
        dy = y - self.y_coord

        col = (self.y_scale * dx - self.x_skew * dy) / det
        row = (self.x_scale * dy - self.y_skew * dx) / det

        if not (math.isfinite(col) and math.isfinite(row)):
            raise DegenerateTransformError(
                f"World to image mapping of {world_x_y} overflowed; the transform "
                f"is not singular (determinant {det!r}) but the result is outside float range",
                det,
            )
        return (col, row)

    def inverse(self, tolerance: float | None = None) -> WorldFile:
        """Return the transform mapping world coordinates to pixel coordinates.

        Raises:
            DegenerateTransformError: If the transform is singular or the
                inverse coefficients overflow float range.
        """
        det = self._checked_determinant(tolerance)
        a, d, b, e, c, f = self.coefficients

        inverted = (
            e / det,
            -d / det,
            -b / det,
            a / det,
            (b * f - e * c) / det,
            (d * c - a * f) / det,
        )
        if not all(math.isfinite(value) for value in inverted):
            raise DegenerateTransformError(
                f"Inverse of world file transform overflowed (determinant {det!r}); "
                "the coefficients are outside float range",
                det,
            )
        return WorldFile(*inverted, singular_tolerance=self.singular_tolerance)

    def image_to_world_array(self, points: npt.ArrayLike) -> np.ndarray:
        """Vectorised image_to_world for an (N, 2) array of (col, row) pairs.

        Returns:
            (N, 2) float64 array of (x, y) pairs.

        Raises:
            ValueError: If points is not an (N, 2) array.
        """
        pts = _as_point_array(points)
        col, row = pts[:, 0], pts[:, 1]
        return np.column_stack(
            (
                self.x_scale * col + self.x_skew * row + self.x_coord,
                self.y_skew * col + self.y_scale * row + self.y_coord,
            )
        )

    def world_to_image_array(
        self,
        points: npt.ArrayLike,
        tolerance: float | None = None,
    ) -> np.ndarray:
        """Vectorised world_to_image for an (N, 2) array of (x, y) pairs.

        Returns:
            (N, 2) float64 array of (col, row) pairs.

        Raises:
            ValueError: If points is not an (N, 2) array.
            DegenerateTransformError: If the transform is singular or any
                result overflows float range.
        """
        pts = _as_point_array(points)
        det = self._checked_determinant(tolerance)
        with np.errstate(over='ignore', invalid='ignore'):
            dx = pts[:, 0] - self.x_coord
            dy = pts[:, 1] - self.y_coord
            result = np.column_stack(
                (
                    (self.y_scale * dx - self.x_skew * dy) / det,
                    (self.x_scale * dy - self.y_skew * dx) / det,
                )
            )

        if not np.isfinite(result).all():
            raise DegenerateTransformError(
                "World to image mapping overflowed; the transform is not singular "
                f"(determinant {det!r}) but a result is outside float range",
                det,
            )
        return result


def _as_point_array(points: npt.ArrayLike) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"points must have shape (N, 2), got {pts.shape}")
    return pts
