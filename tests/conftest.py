"""Pytest fixtures with small synthetic ERA5 files."""

import numpy as np
import pytest
from netCDF4 import Dataset

STANDARD_GRAVITY = 9.80665

# ERA5 stores latitudes in descending order
LATS = np.array([10.0, 0.0, -10.0], np.float32)
LONS = np.array([0.0, 90.0, 180.0, 270.0], np.float32)
# Hours since 1900-01-01, for 2020-01-01 00Z and 01Z
TIMES = np.array([1051896, 1051897], np.int32)
LEVELS = np.array([1000, 850, 700, 500, 300], np.int32)
# Level heights above the surface, in km
LEVEL_HEIGHTS = np.array([0.11, 1.46, 3.01, 5.57, 9.16])

AIR_TEMPERATURE = 290.0
DEWPOINT = 285.0
LAPSE_RATE = 5.5
SURFACE_PRESSURE = 101300.0
# Column vapor for each ERA5 latitude, in kg/m^2
COLUMN_VAPOR = np.array([10.0, 20.0, 30.0])
# Cloud liquid in the first longitude column only, at the 850 hPa level
COLUMN_LIQUID = 0.2
CLOUD_LEVEL = 1


@pytest.fixture
def era5_files(tmp_path):
    """Write a pair of ERA5 surface/levels files and return their paths."""
    num_time, num_lat, num_lon = len(TIMES), len(LATS), len(LONS)
    shape = (num_time, num_lat, num_lon)

    surface_file = tmp_path / "era5_surface_2020-01-01.nc"
    with Dataset(surface_file, "w") as f:
        f.createDimension("longitude", num_lon)
        f.createDimension("latitude", num_lat)
        f.createDimension("time", num_time)
        f.createVariable("longitude", np.float32, ("longitude",))[:] = LONS
        f.createVariable("latitude", np.float32, ("latitude",))[:] = LATS
        f.createVariable("time", np.int32, ("time",))[:] = TIMES

        dims = ("time", "latitude", "longitude")
        tcwv = np.broadcast_to(COLUMN_VAPOR[np.newaxis, :, np.newaxis], shape)
        tclw = np.zeros(shape)
        tclw[:, :, 0] = COLUMN_LIQUID
        for name, values in (
            ("sp", np.full(shape, SURFACE_PRESSURE)),
            ("t2m", np.full(shape, AIR_TEMPERATURE)),
            ("d2m", np.full(shape, DEWPOINT)),
            ("z", np.zeros(shape)),
            ("tcwv", tcwv),
            ("tclw", tclw),
        ):
            f.createVariable(name, np.float64, dims)[...] = values

    levels_file = tmp_path / "era5_levels_2020-01-01.nc"
    with Dataset(levels_file, "w") as f:
        f.createDimension("longitude", num_lon)
        f.createDimension("latitude", num_lat)
        f.createDimension("level", len(LEVELS))
        f.createDimension("time", num_time)
        f.createVariable("longitude", np.float32, ("longitude",))[:] = LONS
        f.createVariable("latitude", np.float32, ("latitude",))[:] = LATS
        f.createVariable("level", np.int32, ("level",))[:] = LEVELS
        f.createVariable("time", np.int32, ("time",))[:] = TIMES

        dims = ("time", "level", "latitude", "longitude")
        shape_4d = (num_time, len(LEVELS), num_lat, num_lon)
        heights = LEVEL_HEIGHTS[np.newaxis, :, np.newaxis, np.newaxis]
        clwc = np.zeros(shape_4d)
        clwc[:, CLOUD_LEVEL, :, 0] = 1e-4
        for name, values in (
            ("t", np.broadcast_to(AIR_TEMPERATURE - LAPSE_RATE * heights, shape_4d)),
            ("z", np.broadcast_to(heights * 1e3 * STANDARD_GRAVITY, shape_4d)),
            ("clwc", clwc),
        ):
            f.createVariable(name, np.float64, dims)[...] = values

    return surface_file, levels_file
