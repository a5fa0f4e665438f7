"""Envelopes and grid geometry: the spatial half of a raster description."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from affine import Affine
from rasterio.crs import CRS
from rasterio.transform import array_bounds
from shapely.geometry import Polygon, box

from magellan.geo.crs import decode_crs


@dataclass(frozen=True)
class Envelope:
    """
    Axis-aligned bounding box, optionally tagged with the CRS its
    coordinates are expressed in.
    """
    crs: Optional[CRS]
    minx: float
    miny: float
    maxx: float
    maxy: float

    def __post_init__(self) -> None:
        if self.minx > self.maxx or self.miny > self.maxy:
            raise ValueError(
                f"Envelope lower corner ({self.minx}, {self.miny}) exceeds "
                f"upper corner ({self.maxx}, {self.maxy})"
            )

    @classmethod
    def from_origin(
        cls,
        crs: Optional[CRS],
        origin_x: float,
        origin_y: float,
        width: float,
        height: float,
    ) -> "Envelope":
        """
        Build from the minimum corner plus a width and height in CRS units.
        """
        if width < 0 or height < 0:
            raise ValueError(f"Envelope width/height must be non-negative, got {width}x{height}")
        return cls(
            crs,
            float(origin_x),
            float(origin_y),
            float(origin_x) + float(width),
            float(origin_y) + float(height),
        )

    @classmethod
    def from_corners(
        cls,
        lower: Sequence[float],
        upper: Sequence[float],
        crs: Optional[CRS] = None,
    ) -> "Envelope":
        (minx, miny), (maxx, maxy) = lower, upper
        return cls(crs, float(minx), float(miny), float(maxx), float(maxy))

    @property
    def width(self) -> float:
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        return self.maxy - self.miny

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.minx, self.miny, self.maxx, self.maxy)

    @property
    def lower_corner(self) -> Tuple[float, float]:
        return (self.minx, self.miny)

    @property
    def upper_corner(self) -> Tuple[float, float]:
        return (self.maxx, self.maxy)

    def to_geometry(self) -> Polygon:
        return box(*self.bounds)

    def with_crs(self, crs: Optional[CRS]) -> "Envelope":
        return Envelope(crs, *self.bounds)


@dataclass(frozen=True)
class GridGeometry:
    """
    Pixel-to-world mapping of a raster: the affine transform of the
    upper-left pixel corner plus the pixel dimensions it covers.
    """
    transform: Affine
    width: int
    height: int

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def resolution(self) -> Tuple[float, float]:
        return (abs(self.transform.a), abs(self.transform.e))

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(minx, miny, maxx, maxy) of the grid in world coordinates."""
        west, south, east, north = array_bounds(self.height, self.width, self.transform)
        return (
            min(west, east),
            min(south, north),
            max(west, east),
            max(south, north),
        )

    def envelope(self, crs: Optional[CRS]) -> Envelope:
        return Envelope(crs, *self.bounds)


def make_envelope(
    crs_code: Union[str, int],
    origin_x: float,
    origin_y: float,
    width: float,
    height: float,
) -> Envelope:
    """
    Construct an envelope in the CRS named by `crs_code`.

    Args:
        crs_code: Authority code, e.g. "EPSG:3857"
        origin_x: Minimum x of the envelope
        origin_y: Minimum y of the envelope
        width: Extent along x in CRS units
        height: Extent along y in CRS units

    Returns:
        Envelope: CRS-tagged bounding box

    Raises:
        CrsLookupError: If `crs_code` cannot be resolved
    """
    return Envelope.from_origin(decode_crs(crs_code), origin_x, origin_y, width, height)
