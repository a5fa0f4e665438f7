"""Typed failures raised by the raster facade.

Every public operation raises one of these instead of returning an empty
result, so callers can tell a missing file from a corrupt one from a
failed write.
"""


class MagellanError(Exception):
    """Base error for raster facade operations."""


class NotFoundError(MagellanError, FileNotFoundError):
    """Input file does not exist."""


class DecodeError(MagellanError):
    """File exists but could not be decoded as a raster."""


class EncodeError(MagellanError):
    """Raster could not be written to disk."""


class DescriptorError(MagellanError):
    """Coverage handle is missing or cannot be described."""


class CrsError(MagellanError):
    """Base error for coordinate reference system handling."""


class CrsLookupError(CrsError):
    """Authority code could not be resolved to a CRS."""


class CrsParseError(CrsError):
    """CRS definition (WKT or PROJ string) is malformed."""


class TransformError(MagellanError):
    """Engine transform failed, e.g. a non-invertible reprojection."""


class EmptyResultError(MagellanError):
    """Operation would produce a raster with no pixels."""


class ShapeError(MagellanError, ValueError):
    """Matrix input is not rectangular."""


class BandIndexError(MagellanError, IndexError):
    """Band index is outside the raster's band range."""
