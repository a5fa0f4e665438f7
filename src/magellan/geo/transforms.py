"""Reprojection, resampling and cropping of rasters.

Each operation runs one engine transform on the input coverage and passes
the new coverage back through build_raster_info. Inputs are never modified.
"""

import logging
import math
from typing import Any, Optional, Tuple

import numpy as np
from rasterio.warp import (
    Resampling,
    calculate_default_transform,
    reproject as warp_reproject,
    transform_bounds,
)
from rasterio.windows import Window, from_bounds
from rasterio.windows import transform as window_transform

from magellan.configs import constants
from magellan.core import get_memory_mb
from magellan.errors import EmptyResultError, TransformError
from magellan.geo.crs import CrsLike, ensure_crs
from magellan.geo.envelope import Envelope, GridGeometry
from magellan.geo.raster import Coverage, RasterInfo, build_raster_info


def _warp_fill(coverage: Coverage) -> Tuple[Any, Optional[float]]:
    """
    Pick the value for destination pixels outside the source footprint and
    the nodata the warped coverage declares. Float rasters without nodata
    are filled with NaN, which band statistics already skip. Integer
    rasters without nodata get the first dtype extreme absent from the data.
    """
    if coverage.nodata is not None:
        return coverage.nodata, coverage.nodata
    dtype = coverage.data.dtype
    if np.issubdtype(dtype, np.floating):
        return np.nan, None
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        for candidate in (info.min, info.max):
            if not (coverage.data == candidate).any():
                return candidate, candidate
    return 0, None


def _warp_coverage(
    raster: RasterInfo,
    dst_crs,
    dst_transform,
    dst_shape: Tuple[int, int],
    resampling: Resampling,
) -> Tuple[np.ndarray, Optional[float]]:
    """
    Warp every band of `raster` onto the destination grid.
    Rasterio creates the new grid, then for every destination pixel finds
    where its center falls in the source grid and interpolates from there.

    Returns the warped array and the nodata value it carries.
    """
    coverage = raster.coverage
    fill, nodata = _warp_fill(coverage)
    destination = np.full((coverage.count, *dst_shape), fill, dtype=coverage.data.dtype)
    warp_reproject(
        source=coverage.data.copy(),
        destination=destination,
        src_transform=raster.grid.transform,
        src_crs=raster.crs,
        src_nodata=coverage.nodata,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=fill,
        resampling=resampling,
    )
    logging.info(f"After warp - Memory: {get_memory_mb():.0f}MB")
    return destination, nodata


def reproject(
    raster: RasterInfo,
    target_crs: CrsLike,
    resampling: Resampling = Resampling.nearest,
) -> RasterInfo:
    """
    Reproject a raster into `target_crs`.

    The output grid is the default one GDAL computes for the target system;
    its envelope, grid and projection all come from the new coverage.

    Args:
        raster: Source raster
        target_crs: CRS handle or authority code
        resampling: Resampling method to use

    Returns:
        RasterInfo: Raster expressed in `target_crs`

    Raises:
        CrsLookupError: If `target_crs` is a code that cannot be resolved
        TransformError: If the engine cannot transform between the systems
    """
    dst_crs = ensure_crs(target_crs)
    try:
        dst_transform, dst_width, dst_height = calculate_default_transform(
            raster.crs,
            dst_crs,
            raster.width,
            raster.height,
            *raster.grid.bounds,
        )
    except Exception as e:
        raise TransformError(
            f"Cannot transform {raster.name} from {raster.crs} to {dst_crs}: {e}"
        ) from e

    if not dst_width or not dst_height or not all(map(math.isfinite, dst_transform)):
        raise TransformError(
            f"Reprojecting {raster.name} to {dst_crs} produced a degenerate grid "
            f"({dst_width}x{dst_height})"
        )

    try:
        data, nodata = _warp_coverage(raster, dst_crs, dst_transform, (dst_height, dst_width), resampling)
    except Exception as e:
        raise TransformError(f"Cannot warp {raster.name} to {dst_crs}: {e}") from e

    return build_raster_info(
        Coverage(
            name=raster.name,
            data=data,
            transform=dst_transform,
            crs=dst_crs,
            nodata=nodata,
        )
    )


def resample(
    raster: RasterInfo,
    target_grid: GridGeometry,
    resampling: Resampling = Resampling.nearest,
) -> RasterInfo:
    """
    Resample a raster onto `target_grid`, keeping its CRS.

    Raises:
        TransformError: If the target grid is empty or the warp fails
    """
    if target_grid.width <= 0 or target_grid.height <= 0:
        raise TransformError(f"Target grid {target_grid.width}x{target_grid.height} is empty")
    try:
        data, nodata = _warp_coverage(raster, raster.crs, target_grid.transform, target_grid.shape, resampling)
    except Exception as e:
        raise TransformError(f"Cannot resample {raster.name}: {e}") from e

    return build_raster_info(
        Coverage(
            name=raster.name,
            data=data,
            transform=target_grid.transform,
            crs=raster.crs,
            nodata=nodata,
        )
    )


def _envelope_in_raster_crs(raster: RasterInfo, envelope: Envelope) -> Envelope:
    if envelope.crs is None or envelope.crs == raster.crs:
        return envelope.with_crs(raster.crs)
    try:
        bounds = transform_bounds(envelope.crs, raster.crs, *envelope.bounds)
    except Exception as e:
        raise TransformError(
            f"Cannot transform crop envelope from {envelope.crs} to {raster.crs}: {e}"
        ) from e
    return Envelope(raster.crs, *bounds)


def crop(raster: RasterInfo, envelope: Envelope) -> RasterInfo:
    """
    Crop a raster to the part of its extent covered by `envelope`.

    The crop is snapped outward to whole pixels. An envelope without a CRS
    is taken to be in the raster's CRS.

    Raises:
        EmptyResultError: If the envelope does not overlap the raster
        TransformError: If the envelope cannot be brought into the raster CRS
    """
    envelope = _envelope_in_raster_crs(raster, envelope)
    overlap = raster.envelope.to_geometry().intersection(envelope.to_geometry())
    if overlap.is_empty or overlap.area == 0:
        raise EmptyResultError(
            f"Envelope {envelope.bounds} does not overlap {raster.name} extent {raster.envelope.bounds}"
        )

    window = from_bounds(*overlap.bounds, transform=raster.grid.transform)
    eps = constants.PIXEL_SNAP_EPS
    col_start = max(0, math.floor(window.col_off + eps))
    row_start = max(0, math.floor(window.row_off + eps))
    col_stop = min(raster.width, math.ceil(window.col_off + window.width - eps))
    row_stop = min(raster.height, math.ceil(window.row_off + window.height - eps))
    if col_stop <= col_start or row_stop <= row_start:
        raise EmptyResultError(f"Envelope {envelope.bounds} covers no whole pixel of {raster.name}")

    pixel_window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    data = raster.coverage.data[:, row_start:row_stop, col_start:col_stop]
    logging.info(f"Cropped {raster.name} to window {pixel_window}")

    return build_raster_info(
        Coverage(
            name=raster.name,
            data=data,
            transform=window_transform(pixel_window, raster.grid.transform),
            crs=raster.crs,
            nodata=raster.coverage.nodata,
        )
    )
