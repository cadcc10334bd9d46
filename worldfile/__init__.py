"""
World file reading, writing and coordinate mapping.

A world file is a six-line sidecar text file holding the affine transform
between the pixels of a raster image and an external planar coordinate
system. This package parses it into an immutable WorldFile value and
converts points in both directions.

Example Usage:
    >>> from worldfile import WorldFile
    >>>
    >>> w = WorldFile.from_string("32.0\\n0.0\\n0.0\\n-32.0\\n691200.0\\n4576000.0\\n")
    >>> w.image_to_world((171., 343.))
    (696672.0, 4565024.0)
    >>> w.world_to_image((696672., 4565024.))
    (171.0, 343.0)

Pixel coordinates can be fractional: (10.0, 2.0) is the top left of pixel
(10, 2) and (10.5, 2.5) is its middle. No spatial reference system is stored.

Available Classes:
    Core:
        - WorldFile: Immutable six-coefficient affine transform
        - WorldFileConfig: Parsing and inversion options

    Errors:
        - WorldFileError: Base class, with an ErrorKind tag
        - MalformedWorldFileError: Content is not a valid world file
        - UnreadableWorldFileError: Content could not be read
        - DegenerateTransformError: Inverse requested on a singular transform
"""

from worldfile.config import WorldFileConfig, get_default_config
from worldfile.errors import (
    DegenerateTransformError,
    ErrorKind,
    MalformedWorldFileError,
    UnreadableWorldFileError,
    WorldFileError,
)
from worldfile.geotransform import (
    apply_geotransform,
    geotransform_from_world_file,
    world_file_from_geotransform,
)
from worldfile.world_file import DefaultFileSystem, FileSystem, WorldFile

__all__ = [
    # Core
    'WorldFile',
    'WorldFileConfig',
    'get_default_config',
    'FileSystem',
    'DefaultFileSystem',

    # Errors
    'WorldFileError',
    'ErrorKind',
    'MalformedWorldFileError',
    'UnreadableWorldFileError',
    'DegenerateTransformError',

    # GDAL interop
    'apply_geotransform',
    'geotransform_from_world_file',
    'world_file_from_geotransform',
]

__version__ = '0.1.0'
