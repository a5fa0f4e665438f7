"""Raster reading and writing."""

import gc
import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Union

import numpy as np
import rasterio
from rasterio.windows import Window

from magellan.configs import constants
from magellan.configs.write import DEFAULT_WRITE_CONFIG, GeoTiffWriteConfig
from magellan.core import estimate_raster_size_gb, get_memory_mb
from magellan.errors import DecodeError, EncodeError, NotFoundError
from magellan.geo.raster import Coverage, RasterInfo, build_raster_info


def estimate_window_size_gb(window: Window, dtype: np.dtype = np.uint16, n_bands: int = 1) -> float:
    """
    Estimate the memory size of a raster window in gigabytes.

    Args:
        window: Rasterio window object
        dtype: Pixel data type (default: uint16)
        n_bands: Number of bands read per pixel

    Returns:
        float: Estimated size in GB
    """
    return estimate_raster_size_gb(int(window.height), int(window.width), dtype, n_bands)


def read_raster_window_chunked(
    raster: rasterio.DatasetReader,
    window: Window,
    max_size_gb: float = None,
    chunk_height: int = None
) -> np.ndarray:
    """
    Read all bands of a raster window in row chunks to avoid memory issues
    with large windows.

    Args:
        raster: Open rasterio dataset reader
        window: Window to read from the raster
        max_size_gb: Maximum window size in GB before chunking (default: from constants)
        chunk_height: Height of each chunk in rows (default: from constants)

    Returns:
        np.ndarray: (bands, rows, cols) array containing the windowed raster data
    """
    if max_size_gb is None:
        max_size_gb = constants.MAX_WINDOW_SIZE_GB
    if chunk_height is None:
        chunk_height = constants.CHUNK_HEIGHT

    window_size_gb = estimate_window_size_gb(window, np.dtype(raster.dtypes[0]), raster.count)
    logging.info(f"Estimated window size: {window_size_gb:.2f}GB")

    if window_size_gb <= max_size_gb:
        return raster.read(window=window)

    logging.info("Large window detected - reading in chunks")
    height = int(window.height)
    chunks = []
    for row_start in range(0, height, chunk_height):
        chunk_window = Window(
            window.col_off,
            window.row_off + row_start,
            window.width,
            min(chunk_height, height - row_start)
        )
        logging.info(
            f"Reading chunk at row {row_start}/{height} - "
            f"Memory: {get_memory_mb():.0f}MB"
        )
        chunks.append(raster.read(window=chunk_window))

    result = np.concatenate(chunks, axis=1)
    del chunks
    gc.collect()
    return result


def read_raster(path: Union[str, Path]) -> RasterInfo:
    """
    Read a raster file of any format GDAL can detect.

    Args:
        path: Path of the raster file

    Returns:
        RasterInfo: Description of the raster with all bands loaded

    Raises:
        NotFoundError: If `path` does not exist
        DecodeError: If the file cannot be opened or decoded as a raster
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"Cannot read raster. No such file: {path}")

    try:
        with rasterio.open(path) as ds:
            window = Window(0, 0, ds.width, ds.height)
            data = read_raster_window_chunked(ds, window)
            coverage = Coverage(
                name=path.stem,
                data=data,
                transform=ds.transform,
                crs=ds.crs,
                nodata=ds.nodata,
            )
        raster = build_raster_info(coverage)
    except Exception as e:
        raise DecodeError(f"Cannot read raster {path}: {type(e).__name__}: {e}") from e

    logging.info(
        f"Read {path.name}: {raster.width}x{raster.height}, {len(raster.bands)} band(s) - "
        f"Memory: {get_memory_mb():.0f}MB"
    )
    return raster


def write_raster(
    raster: RasterInfo,
    path: Union[str, Path],
    config: Optional[GeoTiffWriteConfig] = None,
) -> Path:
    """
    Write a raster as a tiled, compressed GeoTIFF.

    The file is written under a temporary name in the target directory and
    renamed into place once complete, so `path` never holds a partial file.

    Args:
        raster: Raster to write
        path: Destination path; its parent directory must exist
        config: Compression and tiling settings (default: LZW, 0.5, 256x16 tiles)

    Returns:
        Path: The written path

    Raises:
        EncodeError: If the raster cannot be encoded or written
    """
    if config is None:
        config = DEFAULT_WRITE_CONFIG
    if not isinstance(raster, RasterInfo):
        raise EncodeError(f"Expected a RasterInfo, got {type(raster).__name__}")

    path = Path(path)
    coverage = raster.coverage
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
    profile = {
        "driver": config.driver,
        "height": raster.height,
        "width": raster.width,
        "count": coverage.count,
        "dtype": coverage.data.dtype,
        "crs": raster.crs,
        "transform": raster.grid.transform,
        "nodata": coverage.nodata,
        **config.creation_options(),
    }
    try:
        with rasterio.open(tmp_path, "w", **profile) as dst:
            dst.write(coverage.data)
        os.replace(tmp_path, path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise EncodeError(f"Cannot write raster to {path}: {type(e).__name__}: {e}") from e

    logging.info(f"Wrote {raster.name} to {path} ({config.compression}, tiled={config.tiled})")
    return path
