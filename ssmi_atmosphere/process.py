"""Process an entire daily file.

Example usage:

python -m ssmi_atmosphere.process \
    era5_surface_2020-01-01.nc \
    era5_levels_2020-01-01.nc \
    ssmi_atmosphere_2020-01-01.nc
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter_ns
from typing import NamedTuple, Optional, Sequence

import numpy as np
from netCDF4 import Dataset, getlibversion, num2date
from numpy.typing import NDArray

from . import era5, rtm
from .channels import FREQUENCIES, FrequencyChannel
from .store import Precision, write_slice

# SSM/I channels to compute
REF_CHANNELS: NDArray[np.int32] = np.array(
    [channel.value for channel in FrequencyChannel], np.int32
)

# SSM/I Earth incidence angle (in degrees)
REF_EIA = 53.1


class RtmHourlyData(NamedTuple):
    """Output values after computing the atmospheric RTM for one hour."""

    # Atmospheric transmissivity, unitless, dimensioned as (lats, lons,
    # channel).
    transmissivity: NDArray[np.float32]

    # Atmospheric upwelling brightness temperature in K, dimensioned as (lats,
    # lons, channel).
    tb_up: NDArray[np.float32]

    # Atmospheric downwelling brightness temperature in K, dimensioned as (lats,
    # lons, channel).
    tb_down: NDArray[np.float32]

    # The RTM inputs, each dimensioned as (lats, lons)
    summary: era5.ProfileSummary


def create_rtm_file(
    rtm_output: Path,
    lats: NDArray[np.float32],
    lons: NDArray[np.float32],
    time: NDArray[np.int32],
    incidence: NDArray[np.float32],
) -> None:
    """Create the netCDF output file with its coordinates and empty variables.

    The data variables are filled in one time step at a time by
    `store.write_slice`.
    """
    timestamp = datetime.now(timezone.utc).isoformat(" ", "seconds")
    nc_version = getlibversion().partition(" ")[0]

    time_units = "hours since 1900-01-01 00:00:00Z"
    data_times = num2date(time, time_units)
    time_start = min(data_times).isoformat(" ", "seconds")
    time_end = max(data_times).isoformat(" ", "seconds")

    with Dataset(rtm_output, "w") as f:
        # ----------
        # Global attributes
        f.setncattr_string("Conventions", "CF-1.9,ACDD-1.3")
        f.setncattr_string("title", "SSM/I atmospheric RTM output")
        f.setncattr_string("history", f"{timestamp} created: {' '.join(sys.argv[1:])}")
        f.setncattr_string("netcdf_version_id", nc_version)
        f.setncattr_string("date_created", timestamp)
        f.setncattr("geospatial_lat_min", np.float32(np.min(lats)))
        f.setncattr("geospatial_lat_max", np.float32(np.max(lats)))
        f.setncattr("geospatial_lon_min", np.float32(np.min(lons)))
        f.setncattr("geospatial_lon_max", np.float32(np.max(lons)))
        f.setncattr_string("time_coverage_start", time_start)
        f.setncattr_string("time_coverage_end", time_end)
        f.setncattr_string("standard_name_vocabulary", "CF Standard Name Table v78")

        # ----------
        # Dimensions
        f.createDimension("time", len(time))
        f.createDimension("lat", len(lats))
        f.createDimension("lon", len(lons))
        f.createDimension("channel", len(REF_CHANNELS))

        # ----------
        # Coordinate variables
        v = f.createVariable("time", np.int32, ("time",))
        v[:] = time
        v.setncattr_string("standard_name", "time")
        v.setncattr_string("axis", "T")
        v.setncattr_string("units", time_units)

        v = f.createVariable("lat", np.float32, ("lat",))
        v[:] = lats
        v.setncattr_string("standard_name", "latitude")
        v.setncattr_string("axis", "Y")
        v.setncattr_string("units", "degrees_north")

        v = f.createVariable("lon", np.float32, ("lon",))
        v[:] = lons
        v.setncattr_string("standard_name", "longitude")
        v.setncattr_string("axis", "X")
        v.setncattr_string("units", "degrees_east")

        v = f.createVariable("channel", np.int32, ("channel",))
        v[:] = REF_CHANNELS
        v.setncattr_string("long_name", "SSM/I channel number")

        v = f.createVariable("freq", np.float32, ("channel",))
        v[:] = FREQUENCIES[REF_CHANNELS - 1]
        v.setncattr_string("standard_name", "sensor_band_central_radiation_frequency")
        v.setncattr_string("long_name", "frequency")
        v.setncattr_string("units", "GHz")

        v = f.createVariable("eia", np.float32, ("channel",))
        v[:] = incidence
        v.setncattr_string("standard_name", "sensor_zenith_angle")
        v.setncattr_string("long_name", "incidence angle")
        v.setncattr_string("units", "degree")

        # ----------
        # Variables
        for name, attrs in (
            ("col_vapor", {
                "standard_name": "atmosphere_mass_content_of_water_vapor",
                "long_name": "columnar water vapor",
                "units": "kg m-2",
            }),
            ("col_water", {
                "standard_name": "atmosphere_mass_content_of_cloud_liquid_water",
                "long_name": "columnar liquid cloud content",
                "units": "kg m-2",
            }),
            ("vapor_scale_height", {
                "long_name": "water vapor density scale height",
                "units": "km",
            }),
            ("lapse_rate", {"long_name": "temperature lapse rate", "units": "K km-1"}),
            ("cloud_height", {
                "long_name": "effective cloud height above the surface",
                "units": "km",
            }),
        ):
            v = f.createVariable(name, np.float32, ("time", "lat", "lon"), zlib=True)
            for key, value in attrs.items():
                v.setncattr_string(key, value)
            v.setncattr_string("coordinates", "lat lon")

        for name, attrs in (
            ("tran", {"long_name": "atmospheric transmissivity"}),
            ("tb_up", {"long_name": "upwelling brightness temperature", "units": "kelvin"}),
            ("tb_down", {
                "long_name": "downwelling brightness temperature",
                "units": "kelvin",
            }),
        ):
            v = f.createVariable(
                name, np.float32, ("time", "lat", "lon", "channel"), zlib=True
            )
            for key, value in attrs.items():
                v.setncattr_string(key, value)
            v.setncattr_string("coordinates", "lat lon")


def run_rtm(
    summary: era5.ProfileSummary,
    incidence: NDArray[np.float32],
    verbose: bool = False,
) -> RtmHourlyData:
    """Run the RTM on one hour of summarized profiles, dimensioned as (lats, lons)."""
    if verbose:
        print("Running RTM over all data")

    tick = perf_counter_ns()

    # The profiles are organized by lat/lon, but we need to vectorize that down
    # for the RTM and then reshape the output when finished
    num_lat, num_lon = summary.surface_pressure.shape
    atmo_results = rtm.compute(
        *(np.ravel(a) for a in summary),
        incidence,
        REF_CHANNELS,
    )

    tock = perf_counter_ns()
    duration_seconds = (tock - tick) * 1e-9
    if verbose:
        print(f"Finished RTM in {duration_seconds:0.2f} s")

    shape = (num_lat, num_lon, len(REF_CHANNELS))
    return RtmHourlyData(
        np.reshape(atmo_results.tran, shape),
        np.reshape(atmo_results.tb_up, shape),
        np.reshape(atmo_results.tb_down, shape),
        summary,
    )


def write_rtm_hour(rtm_data: RtmHourlyData, rtm_output: Path, time_index: int) -> None:
    """Write one hour of RTM output into an existing output file."""
    summary = rtm_data.summary
    for name, values in (
        ("col_vapor", summary.water_vapor),
        ("col_water", summary.liquid_water),
        ("vapor_scale_height", summary.vapor_scale_height),
        ("lapse_rate", summary.lapse_rate),
        ("cloud_height", summary.cloud_height),
        ("tran", rtm_data.transmissivity),
        ("tb_up", rtm_data.tb_up),
        ("tb_down", rtm_data.tb_down),
    ):
        write_slice(rtm_output, name, values, time_index, Precision.SINGLE)


def convert_all(
    era5_surface_input: Path,
    era5_levels_input: Path,
    rtm_output: Path,
    time_indices: Optional[Sequence[int]],
    incidence_angle: float = REF_EIA,
    verbose: bool = False,
) -> None:
    """Read the ERA5 profile/surface files and run the RTM and write its output.

    The ERA5 data is read and processed one hour at a time, and each hour is
    written to the output file as soon as it is done.
    """
    all_time_indices: Sequence[int]
    if time_indices is None:
        all_time_indices = era5.read_time_indices(era5_surface_input, era5_levels_input)
    else:
        all_time_indices = time_indices

    incidence = np.full(len(REF_CHANNELS), incidence_angle, np.float32)
    lats, lons, time = era5.read_coordinates(era5_surface_input, all_time_indices)

    if verbose:
        print(f"Creating output file: {rtm_output}")
    create_rtm_file(rtm_output, lats, lons, time, incidence)

    for out_index, time_index in enumerate(all_time_indices):
        era5_data = era5.read_era5_data(
            era5_surface_input, era5_levels_input, [time_index], verbose=verbose
        )
        summary = era5.summarize_profiles(era5_data)
        # Only one hour was read, so drop the time axis
        hourly = era5.ProfileSummary(*(a[0] for a in summary))
        rtm_data = run_rtm(hourly, incidence, verbose)

        if verbose:
            print(f"Writing time index {out_index} to {rtm_output}")
        write_rtm_hour(rtm_data, rtm_output, out_index)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the RTM on one day of ERA5 data")
    parser.add_argument("era5_surface", type=Path, help="ERA5 surface data for one day")
    parser.add_argument("era5_levels", type=Path, help="ERA5 levels data for one day")
    parser.add_argument(
        "rtm_out",
        type=Path,
        help="RTM daily output file",
    )
    parser.add_argument(
        "--time",
        action="append",
        type=int,
        help="Time index to use in the ERA5 data, can be specified multiple times",
    )
    parser.add_argument(
        "--incidence",
        type=float,
        default=REF_EIA,
        metavar="DEG",
        help=f"Earth incidence angle in degrees (default: {REF_EIA})",
    )
    args = parser.parse_args()

    if not 0.0 <= args.incidence < 90.0:
        parser.error("Incidence angle must be in [0, 90) degrees")

    print(f"ERA5 surface file: {args.era5_surface}")
    print(f"ERA5 levels file: {args.era5_levels}")
    print(f"RTM output file: {args.rtm_out}")
    convert_all(
        args.era5_surface,
        args.era5_levels,
        args.rtm_out,
        args.time,
        args.incidence,
        verbose=True,
    )
