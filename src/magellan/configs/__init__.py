"""Configuration constants and write settings for raster processing."""

from .constants import (
    MAX_WINDOW_SIZE_GB,
    CHUNK_HEIGHT,
    CRS,
)
from .write import (
    DEFAULT_WRITE_CONFIG,
    GeoTiffWriteConfig,
    init_write_config,
)

__all__ = [
    "MAX_WINDOW_SIZE_GB",
    "CHUNK_HEIGHT",
    "CRS",
    "DEFAULT_WRITE_CONFIG",
    "GeoTiffWriteConfig",
    "init_write_config",
]
