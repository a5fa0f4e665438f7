"""Immutable raster descriptions and metadata-consistent raster operations."""

__version__ = "0.1.0"

# Import submodules to make them available at package level
from . import configs
from . import core
from . import errors
from . import geo

from .errors import (
    BandIndexError,
    CrsError,
    CrsLookupError,
    CrsParseError,
    DecodeError,
    DescriptorError,
    EmptyResultError,
    EncodeError,
    MagellanError,
    NotFoundError,
    ShapeError,
    TransformError,
)
from .geo import *  # noqa: F401,F403
from .geo import __all__ as _geo_all

__all__ = [
    "configs",
    "core",
    "errors",
    "geo",
    "BandIndexError",
    "CrsError",
    "CrsLookupError",
    "CrsParseError",
    "DecodeError",
    "DescriptorError",
    "EmptyResultError",
    "EncodeError",
    "MagellanError",
    "NotFoundError",
    "ShapeError",
    "TransformError",
    *_geo_all,
]
