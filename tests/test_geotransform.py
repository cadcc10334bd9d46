#!/usr/bin/env python3
"""
Test suite for conversion between world files and GDAL geotransforms.

The GDAL GeoTransform standard defines pixel-to-coordinate transformation as:
    Xgeo = GT[0] + P*GT[1] + L*GT[2]
    Ygeo = GT[3] + P*GT[4] + L*GT[5]

GDAL references the upper-left CORNER of pixel (0, 0), while world files
reference its CENTRE, so the origins differ by half a pixel.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from worldfile import MalformedWorldFileError, WorldFile
from worldfile.geotransform import (
    apply_geotransform,
    geotransform_from_world_file,
    world_file_from_geotransform,
)


class TestApplyGeotransform:
    """Test the apply_geotransform utility function."""

    def test_north_up_raster_origin(self):
        """Test north-up raster transform at origin (0, 0)."""
        gt = [737575.05, 0.15, 0, 4391595.45, 0, -0.15]

        easting, northing = apply_geotransform(0, 0, gt)

        assert easting == pytest.approx(737575.05, abs=0.01), "Easting at origin should match GT[0]"
        assert northing == pytest.approx(4391595.45, abs=0.01), (
            "Northing at origin should match GT[3]"
        )

    def test_north_up_raster_offset_pixel(self):
        """Test north-up raster transform at offset pixel."""
        gt = [737575.05, 0.15, 0, 4391595.45, 0, -0.15]

        # Expected easting = 737575.05 + 10*0.15 = 737576.55
        # Expected northing = 4391595.45 + 20*(-0.15) = 4391592.45
        easting, northing = apply_geotransform(10, 20, gt)

        assert easting == pytest.approx(737576.55, abs=0.01)
        assert northing == pytest.approx(4391592.45, abs=0.01)

    def test_rotated_raster(self):
        """Test rotated raster (22.5° clockwise) affine transform."""
        # 0.15m pixels rotated 22.5°: 0.15*cos ≈ 0.1387, 0.15*sin ≈ 0.0574
        gt = [500000, 0.1387, 0.0574, 4400000, 0.0574, -0.1387]

        easting, northing = apply_geotransform(100, 0, gt)
        assert easting == pytest.approx(500013.87, abs=0.01)
        assert northing == pytest.approx(4400005.74, abs=0.01)

        easting, northing = apply_geotransform(0, 100, gt)
        assert easting == pytest.approx(500005.74, abs=0.01)
        assert northing == pytest.approx(4399986.13, abs=0.01)

    @pytest.mark.parametrize("length", [0, 5, 7])
    def test_wrong_length_rejected(self, length):
        """Test that geotransform must have exactly 6 elements."""
        with pytest.raises(ValueError, match="exactly 6 elements"):
            apply_geotransform(0, 0, [1.0] * length)


class TestGeotransformFromWorldFile:
    """Test world file -> GDAL geotransform conversion."""

    def test_north_up_example(self):
        """Test the origin moves half a pixel up and left."""
        wf = WorldFile(32.0, 0.0, 0.0, -32.0, 691200.0, 4576000.0)

        gt = geotransform_from_world_file(wf)

        assert gt == (691184.0, 32.0, 0.0, 4576016.0, 0.0, -32.0)

    def test_rotated_origin_shift(self):
        """Test the half-pixel shift includes the rotation terms."""
        wf = WorldFile(
            x_scale=0.1387, y_skew=0.0574, x_skew=0.0574, y_scale=-0.1387,
            x_coord=500000.0, y_coord=4400000.0,
        )

        gt = geotransform_from_world_file(wf)

        assert gt[0] == pytest.approx(500000.0 - 0.5 * 0.1387 - 0.5 * 0.0574)
        assert gt[3] == pytest.approx(4400000.0 - 0.5 * 0.0574 + 0.5 * 0.1387)
        assert gt[1:3] == (0.1387, 0.0574)
        assert gt[4:] == (0.0574, -0.1387)

    def test_pixel_centre_agrees(self):
        """Test a pixel centre maps to the same point through both representations."""
        wf = WorldFile(32.0, 0.0, 0.0, -32.0, 691200.0, 4576000.0)
        gt = geotransform_from_world_file(wf)

        assert apply_geotransform(171.5, 343.5, gt) == wf.image_to_world((171.0, 343.0))


class TestWorldFileFromGeotransform:
    """Test GDAL geotransform -> world file conversion."""

    def test_north_up_example(self):
        """Test the origin moves half a pixel down and right."""
        gt = [691184.0, 32.0, 0.0, 4576016.0, 0.0, -32.0]

        wf = world_file_from_geotransform(gt)

        assert wf == WorldFile(32.0, 0.0, 0.0, -32.0, 691200.0, 4576000.0)
        assert wf.to_string() == "32.0\n0.0\n0.0\n-32.0\n691200.0\n4576000.0\n"

    def test_accepts_integers(self):
        """Test integer geotransform values are accepted."""
        wf = world_file_from_geotransform((0, 2, 0, 0, 0, -2))

        assert wf.coefficients == (2.0, 0.0, 0.0, -2.0, 1.0, -1.0)

    def test_wrong_length_rejected(self):
        """Test that geotransform must have exactly 6 elements."""
        with pytest.raises(ValueError, match="exactly 6 elements"):
            world_file_from_geotransform([0.0, 1.0, 0.0, 0.0, 0.0])

    def test_non_finite_rejected(self):
        """Test non-finite geotransform values are rejected."""
        with pytest.raises(MalformedWorldFileError):
            world_file_from_geotransform([float("nan"), 1.0, 0.0, 0.0, 0.0, -1.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
