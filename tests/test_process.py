"""Tests for processing a daily pair of ERA5 files."""

import numpy as np
import pytest
from netCDF4 import Dataset

from conftest import COLUMN_LIQUID, COLUMN_VAPOR, TIMES
from ssmi_atmosphere import era5, process

# Channel axis position of the 22 GHz channel
FREQ_22_INDEX = 1


@pytest.fixture
def rtm_output(era5_files, tmp_path):
    """Run the whole day and return the output path."""
    path = tmp_path / "ssmi_atmosphere.nc"
    process.convert_all(*era5_files, path, None)
    return path


class TestConvertAll:
    """Tests for the daily processor."""

    def test_dimensions(self, rtm_output):
        with Dataset(rtm_output, "r") as f:
            assert len(f.dimensions["time"]) == 2
            assert len(f.dimensions["lat"]) == 3
            assert len(f.dimensions["lon"]) == 4
            assert len(f.dimensions["channel"]) == 4
            assert f["tran"].shape == (2, 3, 4, 4)
            assert f["col_vapor"].shape == (2, 3, 4)

    def test_coordinates(self, rtm_output):
        with Dataset(rtm_output, "r") as f:
            assert np.array_equal(f["lat"][:], [-10.0, 0.0, 10.0])
            assert np.array_equal(f["time"][:], TIMES)
            assert np.array_equal(f["channel"][:], [1, 2, 3, 4])
            assert np.allclose(f["freq"][:], [19.35, 22.235, 37.0, 85.5])
            assert np.allclose(f["eia"][:], process.REF_EIA)
            assert f["time"].units == "hours since 1900-01-01 00:00:00Z"

    def test_summary_written(self, rtm_output):
        with Dataset(rtm_output, "r") as f:
            col_vapor = np.ma.getdata(f["col_vapor"][:])
            col_water = np.ma.getdata(f["col_water"][:])
        assert np.allclose(col_vapor[1, :, 2], COLUMN_VAPOR[::-1])
        assert np.allclose(col_water[..., 0], COLUMN_LIQUID)
        assert np.all(col_water[..., 1:] == 0.0)

    def test_rtm_output(self, rtm_output):
        with Dataset(rtm_output, "r") as f:
            tran = np.ma.getdata(f["tran"][:])
            tb_up = np.ma.getdata(f["tb_up"][:])
            tb_down = np.ma.getdata(f["tb_down"][:])
        assert np.all((tran > 0) & (tran <= 1))
        assert np.all(np.isfinite(tb_up))
        assert np.all((tb_down > 0) & (tb_down < 300))
        # Vapor decreases with latitude, so clear-sky transmission increases
        assert np.all(np.diff(tran[:, :, 1:, FREQ_22_INDEX], axis=1) > 0)

    def test_matches_hourly_rtm(self, era5_files, rtm_output):
        """The file holds what the RTM gives for the summarized profiles."""
        data = era5.read_era5_data(*era5_files, time_subset=[0])
        summary = era5.summarize_profiles(data)
        hourly = era5.ProfileSummary(*(a[0] for a in summary))
        incidence = np.full(len(process.REF_CHANNELS), process.REF_EIA, np.float32)
        expected = process.run_rtm(hourly, incidence)
        with Dataset(rtm_output, "r") as f:
            assert np.allclose(f["tb_down"][0, ...], expected.tb_down)
            assert np.allclose(f["cloud_height"][0, ...], hourly.cloud_height)

    def test_time_subset(self, era5_files, tmp_path):
        path = tmp_path / "subset.nc"
        process.convert_all(*era5_files, path, [1], incidence_angle=45.0)
        with Dataset(path, "r") as f:
            assert len(f.dimensions["time"]) == 1
            assert f["time"][0] == TIMES[1]
            assert np.allclose(f["eia"][:], 45.0)
