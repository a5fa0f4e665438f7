"""Build rasters from literal numeric input."""

from typing import Sequence, Union

import numpy as np
from rasterio.transform import from_bounds

from magellan.errors import ShapeError
from magellan.geo.envelope import Envelope
from magellan.geo.raster import Coverage, RasterInfo, build_raster_info


def _as_matrix(matrix: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    if isinstance(matrix, np.ndarray):
        if matrix.ndim != 2:
            raise ShapeError(f"Matrix must be 2-D, got shape {matrix.shape}")
        rows = matrix
    else:
        rows = []
        for row in matrix:
            if isinstance(row, str) or not isinstance(row, (Sequence, np.ndarray)):
                raise ShapeError(f"Matrix rows must be sequences, got {type(row).__name__}")
            rows.append(list(row))
        lengths = {len(row) for row in rows}
        if len(lengths) > 1:
            raise ShapeError(f"Matrix rows have differing lengths: {sorted(lengths)}")
    arr = np.array(rows, dtype=np.float32)
    if arr.ndim != 2 or 0 in arr.shape:
        raise ShapeError(f"Matrix must be a non-empty rows x cols grid, got shape {arr.shape}")
    return arr


def matrix_to_raster(
    name: str,
    matrix: Union[np.ndarray, Sequence[Sequence[float]]],
    envelope: Envelope,
) -> RasterInfo:
    """
    Create a single-band float32 raster from a rows x cols matrix stretched
    over `envelope`. Row 0 is the northern edge.

    Args:
        name: Coverage name
        matrix: Rectangular numeric matrix
        envelope: CRS-tagged extent of the raster

    Returns:
        RasterInfo: Raster with width = cols and height = rows

    Raises:
        ShapeError: If the matrix is ragged, empty or not 2-D
        ValueError: If the envelope has no CRS
    """
    if envelope.crs is None:
        raise ValueError("matrix_to_raster needs an envelope with a CRS")
    arr = _as_matrix(matrix)
    height, width = arr.shape
    transform = from_bounds(*envelope.bounds, width, height)
    return build_raster_info(
        Coverage(
            name=name,
            data=arr[np.newaxis, ...],
            transform=transform,
            crs=envelope.crs,
        )
    )
