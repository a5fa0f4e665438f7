from pathlib import Path
from typing import Optional

import numpy as np
import pytest
import rasterio
from affine import Affine
from rasterio.crs import CRS

# 30 m pixels over the San Francisco bay area
MERCATOR_ORIGIN = (-13630000.0, 4550000.0)
UTM_ORIGIN = (550000.0, 4185000.0)
PIXEL_SIZE = 30.0
WIDTH, HEIGHT = 60, 40


def write_geotiff(
    path: Path,
    data: np.ndarray,
    crs: str,
    transform: Affine,
    nodata: Optional[float] = None,
) -> Path:
    """
    Helper function to write a GeoTIFF file for testing.

    Args:
      path: Path to write the GeoTIFF
      data: (bands, rows, cols) or (rows, cols) array with raster data
      crs: Coordinate reference system
      transform: Affine transform of the upper-left corner
      nodata: Optional nodata value
    """
    if data.ndim == 2:
        data = data[np.newaxis, ...]
    count, height, width = data.shape
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)
    return path


@pytest.fixture
def mercator_tif(tmp_path: Path) -> Path:
    """Two-band uint16 raster in EPSG:3857 with nodata=0 in the first column."""
    values = np.arange(1, WIDTH * HEIGHT + 1, dtype=np.uint16).reshape(HEIGHT, WIDTH)
    values[:, 0] = 0
    data = np.stack([values, values * 2])
    transform = Affine.translation(*MERCATOR_ORIGIN) * Affine.scale(PIXEL_SIZE, -PIXEL_SIZE)
    return write_geotiff(tmp_path / "SRS-EPSG-3857.tif", data, "EPSG:3857", transform, nodata=0)


@pytest.fixture
def utm_tif(tmp_path: Path) -> Path:
    """Single-band float32 raster in EPSG:32610."""
    data = np.linspace(0.0, 1.0, WIDTH * HEIGHT, dtype=np.float32).reshape(HEIGHT, WIDTH)
    transform = Affine.translation(*UTM_ORIGIN) * Affine.scale(PIXEL_SIZE, -PIXEL_SIZE)
    return write_geotiff(tmp_path / "SRS-EPSG-32610.tif", data, "EPSG:32610", transform)


@pytest.fixture
def albers_wkt() -> str:
    return CRS.from_epsg(3310).to_wkt()


@pytest.fixture
def properties_file(tmp_path: Path, albers_wkt: str) -> Path:
    """
    Properties file defining code 900914 as California Albers, split across
    continuation lines, with comments around it.
    """
    split = albers_wkt.index(",", len(albers_wkt) // 2) + 1
    lines = [
        "# Custom projections",
        "! legacy comment style",
        "",
        f"900914 = {albers_wkt[:split]}\\",
        f"    {albers_wkt[split:]}",
    ]
    path = tmp_path / "sample_projections.properties"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
