"""Core utilities shared by the raster operations."""

from .utils import estimate_raster_size_gb, get_memory_mb
from .masks import get_valid_mask

__all__ = [
    "estimate_raster_size_gb",
    "get_memory_mb",
    "get_valid_mask",
]
