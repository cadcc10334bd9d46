"""
Type aliases for coordinate pairs and coefficient tuples.

World files carry no unit or reference system information, so these aliases
only document which space a pair of numbers lives in. They are plain tuple
aliases and have no runtime cost.

Usage Example:
    >>> from worldfile.types import PixelCoordinate, WorldCoordinate
    >>>
    >>> def locate(pixel: PixelCoordinate) -> WorldCoordinate:
    ...     # Signature documents which space each pair belongs to
    ...     pass
"""

# Image coordinates
PixelCoordinate = tuple[float, float]
"""Fractional (column, row) pixel coordinate; integers address pixel corners"""

# World coordinates
WorldCoordinate = tuple[float, float]
"""Opaque (x, y) coordinate in the caller's external planar reference system"""

# Transform parameters
Coefficients = tuple[float, float, float, float, float, float]
"""World file coefficients in file order: (a, d, b, e, c, f)"""

Geotransform = tuple[float, float, float, float, float, float]
"""GDAL geotransform (origin_x, pixel_width, row_rotation, origin_y, col_rotation, pixel_height)"""
