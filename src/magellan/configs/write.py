from dataclasses import dataclass
from typing import Any, Dict, Optional

from magellan.configs import constants

# GDAL creation option that carries a quality factor for each codec.
# LZW is lossless and takes none.
QUALITY_OPTIONS = {
    "JPEG": ("JPEG_QUALITY", 100),
    "WEBP": ("WEBP_LEVEL", 100),
    "DEFLATE": ("ZLEVEL", 9),
    "ZSTD": ("ZSTD_LEVEL", 22),
}


@dataclass(frozen=True)
class GeoTiffWriteConfig:
    driver: str = constants.WRITE_DRIVER
    compression: Optional[str] = constants.WRITE_COMPRESSION  # None = uncompressed
    compression_quality: float = constants.WRITE_COMPRESSION_QUALITY  # 0.0 - 1.0
    tiled: bool = True
    tile_width: int = constants.WRITE_TILE_WIDTH
    tile_height: int = constants.WRITE_TILE_HEIGHT

    def __post_init__(self) -> None:
        if not 0.0 <= self.compression_quality <= 1.0:
            raise ValueError(
                f"compression_quality must be in [0, 1], got {self.compression_quality}"
            )
        if self.tiled:
            # GDAL requires tile dimensions to be multiples of 16
            for label, size in (("tile_width", self.tile_width), ("tile_height", self.tile_height)):
                if size <= 0 or size % 16 != 0:
                    raise ValueError(f"{label} must be a positive multiple of 16, got {size}")

    def creation_options(self) -> Dict[str, Any]:
        """
        Render the config as GDAL creation options for rasterio.open(..., "w").
        """
        options: Dict[str, Any] = {}
        if self.compression is not None:
            compression = self.compression.upper()
            options["compress"] = compression
            if compression in QUALITY_OPTIONS:
                key, scale = QUALITY_OPTIONS[compression]
                options[key.lower()] = max(1, round(self.compression_quality * scale))
        if self.tiled:
            options["tiled"] = True
            options["blockxsize"] = self.tile_width
            options["blockysize"] = self.tile_height
        return options


DEFAULT_WRITE_CONFIG = GeoTiffWriteConfig()


def init_write_config(
    compression: Optional[str] = constants.WRITE_COMPRESSION,
    compression_quality: float = constants.WRITE_COMPRESSION_QUALITY,
    tiled: bool = True,
    tile_width: int = constants.WRITE_TILE_WIDTH,
    tile_height: int = constants.WRITE_TILE_HEIGHT,
) -> GeoTiffWriteConfig:
    """
    Helper function to initialize GeoTiffWriteConfig
    """
    return GeoTiffWriteConfig(
        compression=compression,
        compression_quality=compression_quality,
        tiled=tiled,
        tile_width=tile_width,
        tile_height=tile_height,
)
