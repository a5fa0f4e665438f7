"""Plain-data summaries of rasters for logging, debugging and copying."""

from typing import Any, Dict

import numpy as np

from magellan.geo.crs import crs_to_code, crs_to_wkt
from magellan.geo.raster import RasterInfo, band_stats


def describe_raster(raster: RasterInfo) -> Dict[str, Any]:
    """
    Summarize a raster as nested dicts of plain values.

    The envelope entry holds its minimum corner as the origin, so
    make_envelope(d["crs"], **d["envelope"]) rebuilds the same extent
    when the CRS has an authority code.
    """
    x_res, y_res = raster.grid.resolution
    env = raster.envelope
    return {
        "name": raster.name,
        "crs": crs_to_code(raster.crs) or crs_to_wkt(raster.crs),
        "projection": raster.projection.name if raster.projection else None,
        "envelope": {
            "origin_x": env.minx,
            "origin_y": env.miny,
            "width": env.width,
            "height": env.height,
        },
        "image": {
            "width": raster.width,
            "height": raster.height,
            "resolution": {"x": x_res, "y": y_res},
        },
        "bands": [band_stats(raster, i) for i in range(len(raster.bands))],
    }


def extract_matrix(raster: RasterInfo, band_index: int = 0) -> np.ndarray:
    """
    Return a writable (rows, cols) copy of one band.
    """
    band_stats(raster, band_index)  # validates the index
    return np.array(raster.image[band_index])
