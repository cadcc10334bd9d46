#!/usr/bin/env python3
"""
Conversion between world files and GDAL geotransforms.

GDAL's standard 6-parameter affine GeoTransform and the world file describe
the same affine map with two differences:

    - Parameter order: GDAL stores (GT0, GT1, GT2, GT3, GT4, GT5) =
      (origin_x, a, b, origin_y, d, e); world files store (a, d, b, e, c, f).
    - Pixel origin: GDAL references the UPPER-LEFT CORNER of pixel (0, 0),
      world files reference its CENTRE. The origins differ by half a pixel
      along both axes:
          GT0 = c - 0.5*a - 0.5*b
          GT3 = f - 0.5*d - 0.5*e

References:
    - GDAL GeoTransform: https://gdal.org/tutorials/geotransforms_tut.html
    - World file: https://en.wikipedia.org/wiki/World_file
"""

from typing import Sequence, Tuple

from worldfile.types import Geotransform
from worldfile.world_file import WorldFile


def _check_length(gt: Sequence[float]) -> None:
    if len(gt) != 6:
        raise ValueError(f"geotransform must have exactly 6 elements, got {len(gt)}")


def apply_geotransform(px: float, py: float, gt: Sequence[float]) -> Tuple[float, float]:
    """
    Apply GDAL 6-parameter affine geotransform to convert pixel to world coordinates.

    Implements the GDAL GeoTransform formula:
        Xgeo = GT[0] + P*GT[1] + L*GT[2]
        Ygeo = GT[3] + P*GT[4] + L*GT[5]

    Where:
        GT[0]: X-coordinate of upper-left corner
        GT[1]: Pixel width (world units per pixel in X direction)
        GT[2]: Row rotation (typically 0 for north-up images)
        GT[3]: Y-coordinate of upper-left corner
        GT[4]: Column rotation (typically 0 for north-up images)
        GT[5]: Pixel height (world units per pixel in Y direction, typically negative)

    Args:
        px: Pixel X coordinate (column), 0-indexed from left
        py: Pixel Y coordinate (row), 0-indexed from top
        gt: GeoTransform sequence [GT0, GT1, GT2, GT3, GT4, GT5]

    Returns:
        Tuple of (x, y) world coordinates.

    Raises:
        ValueError: If gt does not have exactly 6 elements.

    Examples:
        >>> gt = [737575.05, 0.15, 0, 4391595.45, 0, -0.15]
        >>> easting, northing = apply_geotransform(10, 20, gt)
        >>> print(f"({easting:.2f}, {northing:.2f})")
        (737576.55, 4391592.45)
    """
    _check_length(gt)

    x = gt[0] + px * gt[1] + py * gt[2]
    y = gt[3] + px * gt[4] + py * gt[5]
    return x, y


def geotransform_from_world_file(world_file: WorldFile) -> Geotransform:
    """
    Convert a world file to the equivalent GDAL geotransform.

    Shifts the origin from the centre of the upper-left pixel to its corner.

    Examples:
        >>> wf = WorldFile(32.0, 0.0, 0.0, -32.0, 691200.0, 4576000.0)
        >>> geotransform_from_world_file(wf)
        (691184.0, 32.0, 0.0, 4576016.0, 0.0, -32.0)
    """
    a, d, b, e, c, f = world_file.coefficients
    return (
        c - 0.5 * a - 0.5 * b,
        a,
        b,
        f - 0.5 * d - 0.5 * e,
        d,
        e,
    )


def world_file_from_geotransform(gt: Sequence[float]) -> WorldFile:
    """
    Convert a GDAL geotransform to the equivalent world file.

    Shifts the origin from the corner of the upper-left pixel to its centre.

    Raises:
        ValueError: If gt does not have exactly 6 elements.
        MalformedWorldFileError: If any resulting coefficient is not finite.
    """
    _check_length(gt)

    origin_x, a, b, origin_y, d, e = (float(value) for value in gt)
    return WorldFile(
        x_scale=a,
        y_skew=d,
        x_skew=b,
        y_scale=e,
        x_coord=origin_x + 0.5 * a + 0.5 * b,
        y_coord=origin_y + 0.5 * d + 0.5 * e,
    )
