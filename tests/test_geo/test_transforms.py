from pathlib import Path

import numpy as np
import pytest

from magellan.errors import EmptyResultError, TransformError
from magellan.geo import transforms
from magellan.geo.crs import decode_crs
from magellan.geo.envelope import Envelope, make_envelope
from magellan.geo.io import read_raster
from magellan.geo.synthesis import matrix_to_raster
from magellan.geo.transforms import crop, reproject, resample


def test_reproject_to_other_crs(mercator_tif: Path, utm_tif: Path):
    raster = read_raster(mercator_tif)
    new_crs = read_raster(utm_tif).crs
    assert raster.crs != new_crs

    reprojected = reproject(raster, new_crs)
    assert reprojected.crs == new_crs
    assert reprojected.envelope.crs == new_crs
    assert reprojected.envelope != raster.envelope
    assert reprojected.projection != raster.projection
    assert len(reprojected.bands) == len(raster.bands)
    assert reprojected.image.shape == (2, reprojected.height, reprojected.width)
    # input untouched
    assert raster.crs == decode_crs("EPSG:3857")


def test_reproject_identity(mercator_tif: Path):
    raster = read_raster(mercator_tif)
    same = reproject(raster, raster.crs)
    assert same.crs == raster.crs
    assert same.projection == raster.projection
    np.testing.assert_allclose(same.envelope.bounds, raster.envelope.bounds, atol=raster.grid.resolution[0])


def test_reproject_to_geographic_by_code(mercator_tif: Path):
    reprojected = reproject(read_raster(mercator_tif), "EPSG:4326")
    assert reprojected.crs == decode_crs("EPSG:4326")
    assert reprojected.projection is None
    minx, miny, maxx, maxy = reprojected.envelope.bounds
    assert -123.0 < minx < maxx < -122.0
    assert 37.0 < miny < maxy < 38.0


def test_reproject_engine_failure(mercator_tif: Path, monkeypatch):
    def failing_transform(*args, **kwargs):
        raise RuntimeError("non-invertible transform")

    monkeypatch.setattr(transforms, "calculate_default_transform", failing_transform)
    with pytest.raises(TransformError):
        reproject(read_raster(mercator_tif), "EPSG:4326")


def test_resample_matches_target_grid():
    envelope = make_envelope("EPSG:3857", 0.0, 0.0, 100.0, 100.0)
    rast1 = matrix_to_raster("100Res", np.ones((100, 100)), envelope)
    rast2 = matrix_to_raster("200Res", np.ones((200, 200)), envelope)
    assert (rast1.width, rast1.height) != (rast2.width, rast2.height)

    resampled = resample(rast1, rast2.grid)
    assert (resampled.width, resampled.height) == (rast2.width, rast2.height)
    assert resampled.grid == rast2.grid
    assert resampled.crs == rast1.crs
    assert (rast1.width, rast1.height) == (100, 100)
    np.testing.assert_array_equal(resampled.image, np.ones((1, 200, 200), dtype=np.float32))


def test_resample_empty_grid():
    envelope = make_envelope("EPSG:3857", 0.0, 0.0, 10.0, 10.0)
    raster = matrix_to_raster("r", np.ones((10, 10)), envelope)
    empty = transforms.GridGeometry(raster.grid.transform, width=0, height=10)
    with pytest.raises(TransformError):
        resample(raster, empty)


def test_crop_shrinks_extent(mercator_tif: Path):
    raster = read_raster(mercator_tif)
    lower, upper = raster.envelope.lower_corner, raster.envelope.upper_corner
    new_upper = [(lo + hi) / 2 for lo, hi in zip(lower, upper)]

    cropped = crop(raster, Envelope.from_corners(lower, new_upper))
    assert cropped.envelope != raster.envelope
    assert cropped.envelope.crs == raster.crs
    assert (cropped.width, cropped.height) == (raster.width // 2, raster.height // 2)
    assert cropped.envelope.bounds == pytest.approx((*lower, *new_upper))
    # lower-left quarter of the source rows/cols
    np.testing.assert_array_equal(
        cropped.image, raster.image[:, raster.height // 2:, : raster.width // 2]
    )


def test_crop_snaps_outward_to_pixels():
    envelope = make_envelope("EPSG:3857", 0.0, 0.0, 10.0, 10.0)
    raster = matrix_to_raster("r", np.arange(100.0).reshape(10, 10), envelope)
    cropped = crop(raster, Envelope.from_corners((2.5, 2.5), (4.2, 6.0), crs=raster.crs))
    assert cropped.envelope.bounds == (2.0, 2.0, 5.0, 6.0)
    assert (cropped.width, cropped.height) == (3, 4)


def test_crop_envelope_larger_than_raster():
    envelope = make_envelope("EPSG:3857", 0.0, 0.0, 10.0, 10.0)
    raster = matrix_to_raster("r", np.ones((10, 10)), envelope)
    cropped = crop(raster, Envelope.from_corners((-50.0, -50.0), (50.0, 50.0)))
    assert cropped.envelope == raster.envelope


@pytest.mark.parametrize(
    "corners",
    [
        ((20.0, 20.0), (30.0, 30.0)),
        ((10.0, 0.0), (20.0, 10.0)),  # shares an edge only
    ],
)
def test_crop_outside_extent(corners):
    envelope = make_envelope("EPSG:3857", 0.0, 0.0, 10.0, 10.0)
    raster = matrix_to_raster("r", np.ones((10, 10)), envelope)
    with pytest.raises(EmptyResultError):
        crop(raster, Envelope.from_corners(*corners))


def test_reprojected_float_stats_stay_in_source_range():
    envelope = make_envelope("EPSG:3857", -13630000.0, 4548800.0, 1800.0, 1200.0)
    matrix = np.tile(np.arange(1.0, 101.0), (40, 1))
    raster = matrix_to_raster("ascending", matrix, envelope)

    reprojected = reproject(raster, "EPSG:32610")
    band = reprojected.bands[0]
    assert band.nodata is None
    assert 1.0 <= band.minimum <= band.maximum <= 100.0


def test_reprojected_integer_fill_becomes_nodata():
    from affine import Affine
    from magellan.geo.raster import Coverage, build_raster_info

    data = np.arange(1, 61 * 41, dtype=np.uint16)[: 60 * 40].reshape(1, 40, 60)
    raster = build_raster_info(
        Coverage(
            name="counts",
            data=data,
            transform=Affine.translation(-13630000.0, 4550000.0) * Affine.scale(30.0, -30.0),
            crs=decode_crs("EPSG:3857"),
        )
    )
    band = reproject(raster, "EPSG:32610").bands[0]
    assert band.nodata == 0
    assert band.minimum >= 1
    assert band.maximum <= raster.bands[0].maximum
