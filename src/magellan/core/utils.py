"""Core utility functions for monitoring and diagnostics."""
import numpy as np
import psutil
import os


def estimate_raster_size_gb(height, width, dtype: np.dtype, n_bands, pow = 3) -> float:
    """
    Estimate the in-memory size of a (bands, height, width) pixel array.

    Args:
        height: Height of the raster in pixels
        width: Width of the raster in pixels
        dtype: Data type of the array (e.g., np.uint16)
        n_bands: Number of bands in the raster
        pow: Power of 1024 to convert bytes to desired unit (default: 3 for GB)
    Returns:
        float: Estimated size in the requested unit
    """
    return (height * width * np.dtype(dtype).itemsize * n_bands) / (1024 ** pow)

def get_memory_mb() -> float:
    """
    Get the current memory usage of the process in megabytes.

    Returns:
        float: Memory usage in MB
    """
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / (1024 * 1024)
