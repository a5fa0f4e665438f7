"""Raster description, CRS utilities and transform operations."""

from .crs import (
    Projection,
    crs_to_code,
    crs_to_wkt,
    decode_crs,
    parse_crs_wkt,
    register_authority_definitions,
    registered_authorities,
)
from .envelope import Envelope, GridGeometry, make_envelope
from .raster import (
    BandDescriptor,
    Coverage,
    RasterInfo,
    band_stats,
    build_raster_info,
)
from .io import read_raster, write_raster
from .transforms import crop, reproject, resample
from .synthesis import matrix_to_raster
from .describe import describe_raster, extract_matrix

__all__ = [
    "BandDescriptor",
    "Coverage",
    "Envelope",
    "GridGeometry",
    "Projection",
    "RasterInfo",
    "band_stats",
    "build_raster_info",
    "crop",
    "crs_to_code",
    "crs_to_wkt",
    "decode_crs",
    "describe_raster",
    "extract_matrix",
    "make_envelope",
    "matrix_to_raster",
    "parse_crs_wkt",
    "read_raster",
    "register_authority_definitions",
    "registered_authorities",
    "reproject",
    "resample",
    "write_raster",
]
