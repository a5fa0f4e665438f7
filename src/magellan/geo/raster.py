"""Canonical raster description and the builder that produces it."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np
from affine import Affine
from rasterio.crs import CRS

from magellan.core.masks import get_valid_mask
from magellan.errors import BandIndexError, DescriptorError
from magellan.geo.crs import Projection, crs_projection
from magellan.geo.envelope import Envelope, GridGeometry


@dataclass(frozen=True, eq=False)
class Coverage:
    """
    Raw coverage handle: pixel data plus the georeferencing that ties it to
    the ground. `data` is laid out as (bands, rows, cols) and is exposed
    read-only; operations build new coverages instead of editing one.
    """
    name: str
    data: np.ndarray
    transform: Affine
    crs: Optional[CRS]
    nodata: Optional[float] = None

    def __post_init__(self) -> None:
        if isinstance(self.data, np.ndarray):
            # private copy so no caller keeps a writable handle on the pixels
            data = np.array(self.data, copy=True)
            data.flags.writeable = False
            object.__setattr__(self, "data", data)

    @property
    def count(self) -> int:
        return self.data.shape[0]

    def rendered_image(self) -> np.ndarray:
        view = self.data.view()
        view.flags.writeable = False
        return view


def _same_value(a: Optional[float], b: Optional[float]) -> bool:
    if a is None or b is None:
        return a is b
    return bool(a == b or (np.isnan(a) and np.isnan(b)))


@dataclass(frozen=True, eq=False)
class BandDescriptor:
    """
    Sample range of one band. `minimum`/`maximum` cover valid pixels only
    and are None when the band has none. A NaN nodata equals another NaN
    nodata.
    """
    index: int
    dtype: str
    minimum: Optional[float]
    maximum: Optional[float]
    nodata: Optional[float] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BandDescriptor):
            return NotImplemented
        return (
            (self.index, self.dtype, self.minimum, self.maximum)
            == (other.index, other.dtype, other.minimum, other.maximum)
            and _same_value(self.nodata, other.nodata)
        )

    def __hash__(self) -> int:
        nodata = "nan" if self.nodata is not None and np.isnan(self.nodata) else self.nodata
        return hash((self.index, self.dtype, self.minimum, self.maximum, nodata))


@dataclass(frozen=True)
class RasterInfo:
    """
    Immutable description of a raster together with its pixel handles.

    Only build_raster_info creates these, so width, height and bands always
    come from an actual coverage. Equality compares metadata only. Instances
    are safe to read from several threads; the wrapped arrays are read-only.
    """
    coverage: Coverage = field(compare=False, repr=False)
    image: np.ndarray = field(compare=False, repr=False)
    crs: CRS
    projection: Optional[Projection]
    envelope: Envelope
    grid: GridGeometry
    width: int
    height: int
    bands: Tuple[BandDescriptor, ...]

    @property
    def name(self) -> str:
        return self.coverage.name


def describe_band(index: int, band: np.ndarray, nodata: Optional[float]) -> BandDescriptor:
    valid = get_valid_mask(band, nodata=nodata)
    if valid.any():
        values = band[valid]
        minimum, maximum = values.min().item(), values.max().item()
    else:
        minimum = maximum = None
    return BandDescriptor(
        index=index,
        dtype=str(band.dtype),
        minimum=minimum,
        maximum=maximum,
        nodata=nodata,
    )


def build_raster_info(coverage: Coverage) -> RasterInfo:
    """
    Describe `coverage` as a RasterInfo. Every RasterInfo is created here.

    Args:
        coverage: Fully materialized coverage

    Returns:
        RasterInfo: Canonical description wrapping the coverage

    Raises:
        DescriptorError: If the coverage is missing, has no renderable
            (bands, rows, cols) image, or lacks georeferencing
    """
    if coverage is None:
        raise DescriptorError("Coverage is None")
    if not isinstance(coverage, Coverage):
        raise DescriptorError(f"Expected a Coverage, got {type(coverage).__name__}")
    if not isinstance(coverage.data, np.ndarray) or coverage.data.ndim != 3:
        raise DescriptorError(f"Coverage {coverage.name!r} has no (bands, rows, cols) image")
    if 0 in coverage.data.shape:
        raise DescriptorError(f"Coverage {coverage.name!r} has an empty image {coverage.data.shape}")
    if coverage.crs is None:
        raise DescriptorError(f"Coverage {coverage.name!r} has no CRS")
    if not isinstance(coverage.transform, Affine):
        raise DescriptorError(f"Coverage {coverage.name!r} has no affine transform")

    image = coverage.rendered_image()
    _, height, width = image.shape
    grid = GridGeometry(transform=coverage.transform, width=width, height=height)
    bands = tuple(
        describe_band(i, image[i], coverage.nodata) for i in range(image.shape[0])
    )
    return RasterInfo(
        coverage=coverage,
        image=image,
        crs=coverage.crs,
        projection=crs_projection(coverage.crs),
        envelope=grid.envelope(coverage.crs),
        grid=grid,
        width=width,
        height=height,
        bands=bands,
    )


def band_stats(raster: RasterInfo, band_index: int) -> Dict[str, Any]:
    """
    Return {"min", "max", "nodata"} for the band at zero-based `band_index`.

    Raises:
        BandIndexError: If `band_index` is outside [0, len(raster.bands))
    """
    if not 0 <= band_index < len(raster.bands):
        raise BandIndexError(
            f"Band index {band_index} out of range for raster with {len(raster.bands)} band(s)"
        )
    band = raster.bands[band_index]
    return {
        "min": band.minimum,
        "max": band.maximum,
        "nodata": band.nodata,
    }
