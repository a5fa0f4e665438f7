"""Configuration constants for raster reading and writing."""
from enum import Enum

# Memory management
MAX_WINDOW_SIZE_GB = 1.0  # Maximum read size in GB before chunking
CHUNK_HEIGHT = 10000  # Number of rows to read per chunk

# GeoTIFF output
WRITE_DRIVER = "GTiff"
WRITE_COMPRESSION = "LZW"
WRITE_COMPRESSION_QUALITY = 0.5
WRITE_TILE_WIDTH = 256
WRITE_TILE_HEIGHT = 16

# Envelope/pixel snapping tolerance when cropping
PIXEL_SNAP_EPS = 1e-9

# CRS
class CRS(Enum):
    WGS84 = "EPSG:4326"
    WEB_MERCATOR = "EPSG:3857"
    CA_ALBERS = "EPSG:3310"
    UTM_10N = "EPSG:32610"
    UTM_11N = "EPSG:32611"
    UTM_32N = "EPSG:32632"
    UTM_33N = "EPSG:32633"

    def __int__(self):
        return int(self.value[self.value.find(":") + 1:])

    def __str__(self):
        return self.value
