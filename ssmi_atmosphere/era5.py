"""Read ERA5 surface and profile data and summarize it for the RTM."""

from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union, cast

import numpy as np
from netCDF4 import Dataset
from numpy.typing import NDArray

from .rtm import MIN_CLOUD_TEMPERATURE, VALID_RANGES

# The reciprocal of the standard gravity, in units of s^2 / m
# https://en.wikipedia.org/wiki/Standard_gravity
INV_STANDARD_GRAVITY = 1 / 9.80665

# Gas constant for water vapor, in J / (kg K)
R_VAPOR = 461.5

# Levels up to this height (km) above the surface are used for the lapse rate
LAPSE_FIT_TOP = 8.0

# Lapse rate (K/km) used where no levels are available for the fit
DEFAULT_LAPSE_RATE = 6.5


class Era5DailyData(NamedTuple):
    """The daily data for ERA5 surface and levels data."""

    # Pressure levels in hPa, with shape (num_levels, ). They should be in
    # descending order (e.g., 1000 to 10).
    levels: NDArray[np.float32]

    # Latitude in degrees North, dimensioned as (num_lats, ). They should be in
    # ascending order (e.g., -90 to 90).
    lats: NDArray[np.float32]

    # Longitude in degrees East, dimensioned as (num_lons, ).
    lons: NDArray[np.float32]

    # Hours since 1900-01-01, dimensioned as (num_time, ).
    time: NDArray[np.int32]

    # Profile air temperature in kelvin, dimensioned as (time, lats, lons, levels)
    temperature: NDArray[np.float32]

    # Geopotential height profile in meters, dimensioned as (time, lats, lons, levels)
    height: NDArray[np.float32]

    # Profile specific liquid water content (from clouds) in kg/kg, dimensioned
    # as (time, lats, lons, levels)
    liquid_content: NDArray[np.float32]

    # Surface pressure in hPa, dimensioned as (time, lats, lons)
    surface_pressure: NDArray[np.float32]

    # 2-meter air temperature in kelvin, dimensioned as (time, lats, lons)
    surface_temperature: NDArray[np.float32]

    # 2-meter dewpoint in kelvin, dimensioned as (time, lats, lons)
    surface_dewpoint: NDArray[np.float32]

    # Geopotential height at the surface in meters, dimensioned as (time, lats, lons)
    surface_height: NDArray[np.float32]

    # Total column water vapor in kg/m^2, dimensioned as (time, lats, lons)
    columnar_water_vapor: NDArray[np.float32]

    # Total column cloud liquid water in kg/m^2, dimensioned as (time, lats, lons)
    columnar_cloud_liquid: NDArray[np.float32]


class ProfileSummary(NamedTuple):
    """The RTM inputs for each profile, all dimensioned as (time, lats, lons)."""

    # Surface pressure in mb
    surface_pressure: NDArray[np.float32]
    # Precipitable water in kg/m^2
    water_vapor: NDArray[np.float32]
    # Water vapor density scale height in km
    vapor_scale_height: NDArray[np.float32]
    # Effective surface air temperature in K
    air_temperature: NDArray[np.float32]
    # Lapse rate in K/km
    lapse_rate: NDArray[np.float32]
    # Cloud liquid water in kg/m^2
    liquid_water: NDArray[np.float32]
    # Effective cloud height in km
    cloud_height: NDArray[np.float32]


def buck_vap(temperature: NDArray[np.float32]) -> NDArray[np.float32]:
    """Buck equation.

    Use the Buck equation to convert temperature in kelvin into water vapor
    saturation pressure in hPa. The equation is from [1], which cites Buck 1996.

    Evaluated at the dewpoint, this is the water vapor partial pressure.

    [1] https://en.wikipedia.org/wiki/Arden_Buck_equation
    """
    # Temperature in degrees Celsius
    temp_c: NDArray[np.float32] = temperature - 273.15
    return cast(
        NDArray[np.float32],
        6.1121 * np.exp((18.678 - temp_c / 234.5) * (temp_c / (257.14 + temp_c))),
    )


def read_time_indices(surface_file: Path, levels_file: Path) -> List[int]:
    """Return the time indices in the surface file that the levels file shares."""
    with Dataset(surface_file, "r") as f:
        surface_time = np.ma.getdata(f["time"][:])
    with Dataset(levels_file, "r") as f:
        levels_time = np.ma.getdata(f["time"][:])
    return [i for i, t in enumerate(surface_time) if t in levels_time]


def read_coordinates(
    surface_file: Path, time_subset: Optional[Sequence[int]] = None
) -> Tuple[NDArray[np.float32], NDArray[np.float32], NDArray[np.int32]]:
    """Read the lats, lons, and times from the surface file.

    The latitudes are returned in ascending order, as in `read_era5_data`.
    """
    times: Union[slice, Sequence[int]]
    times = slice(None) if time_subset is None else time_subset
    with Dataset(surface_file, "r") as f:
        lats = np.ma.getdata(f["latitude"][:])
        lons = np.ma.getdata(f["longitude"][:])
        time = np.ma.getdata(f["time"][times])
    return np.flip(lats), lons, time


def read_era5_data(
    surface_file: Path,
    levels_file: Path,
    time_subset: Optional[Sequence[int]] = None,
    verbose: bool = False,
) -> Era5DailyData:
    """Read the pair of ERA5 surface/levels files.

    Optionally, a subset of the time values can be read.
    """
    if verbose:
        print(f"Reading surface data: {surface_file}")
        if time_subset is not None:
            print(f"Subsetting hour indices to: {time_subset}")

    times: Union[slice, Sequence[int]]
    if time_subset is None:
        times = slice(None)
    else:
        times = time_subset

    # The non-coordinate variables are often stored as packed integers and
    # automatically unpacked to float64. To reduce peak memory usage, each one
    # is converted to a float32 array.
    with Dataset(surface_file, "r") as f:
        lats = f["latitude"][:]
        lons = f["longitude"][:]
        time = f["time"][times]
        surface_pressure = f["sp"][times, :, :].astype(np.float32)
        surface_temperature = f["t2m"][times, :, :].astype(np.float32)
        surface_dewpoint = f["d2m"][times, :, :].astype(np.float32)
        surface_height = f["z"][times, :, :].astype(np.float32)
        columnar_water_vapor = f["tcwv"][times, :, :].astype(np.float32)
        columnar_cloud_liquid = f["tclw"][times, :, :].astype(np.float32)

    if verbose:
        print(f"Reading profiles data: {levels_file}")
    with Dataset(levels_file, "r") as f:
        levels = f["level"][:].astype(np.float32)
        temperature = f["t"][times, :, :, :].astype(np.float32)
        height = f["z"][times, :, :, :].astype(np.float32)
        liquid_content = f["clwc"][times, :, :, :].astype(np.float32)

    if verbose:
        print(f"Post-processing ERA5 data ({len(levels)} pressure levels)")

    # By default, netCDF4 returns masked arrays. There shouldn't be any values
    # that are actually masked in the ERA5 data, so check that assumption and
    # then convert everything to "vanilla" ndarrays.
    arrays = [
        lats,
        lons,
        time,
        surface_pressure,
        surface_temperature,
        surface_dewpoint,
        surface_height,
        columnar_water_vapor,
        columnar_cloud_liquid,
        levels,
        temperature,
        height,
        liquid_content,
    ]
    if any(np.ma.count_masked(a) > 0 for a in arrays):
        raise Exception("Masked input values detected")
    (
        lats,
        lons,
        time,
        surface_pressure,
        surface_temperature,
        surface_dewpoint,
        surface_height,
        columnar_water_vapor,
        columnar_cloud_liquid,
        levels,
        temperature,
        height,
        liquid_content,
    ) = [np.ma.getdata(a) for a in arrays]

    # Convert geopotential to geopotential height
    # (https://apps.ecmwf.int/codes/grib/param-db?id=129)
    height = height * INV_STANDARD_GRAVITY
    surface_height = surface_height * INV_STANDARD_GRAVITY

    # Convert surface pressure from Pa to hPa
    surface_pressure = surface_pressure * 1e-2

    # The 4d arrays should be reordered from (time, levels, lat, lon) to (time,
    # lat, lon, levels)
    temperature = np.moveaxis(temperature, 1, -1)
    height = np.moveaxis(height, 1, -1)
    liquid_content = np.moveaxis(liquid_content, 1, -1)

    # In the ERA5 files, the latitudes are in *descending* order from 90 to
    # -90. Flip them, and every gridded field with them, so they ascend.
    lats = np.flip(lats)
    (
        temperature,
        height,
        liquid_content,
        surface_pressure,
        surface_temperature,
        surface_dewpoint,
        surface_height,
        columnar_water_vapor,
        columnar_cloud_liquid,
    ) = [
        np.flip(a, 1)
        for a in (
            temperature,
            height,
            liquid_content,
            surface_pressure,
            surface_temperature,
            surface_dewpoint,
            surface_height,
            columnar_water_vapor,
            columnar_cloud_liquid,
        )
    ]

    return Era5DailyData(
        levels,
        lats,
        lons,
        time,
        temperature,
        height,
        liquid_content,
        surface_pressure,
        surface_temperature,
        surface_dewpoint,
        surface_height,
        columnar_water_vapor,
        columnar_cloud_liquid,
    )


def summarize_profiles(era5_data: Era5DailyData) -> ProfileSummary:
    """Reduce each ERA5 profile to the scalar inputs of the RTM.

    The temperature profile is fit with a line anchored at the 2-meter
    temperature. The vapor scale height is the column vapor divided by the
    surface vapor density. The cloud height is the liquid-mass-weighted mean
    height above the surface. The lapse rate and vapor scale height are
    clipped to the calibration ranges of the RTM, and the cloud height is
    limited so that the cloud is no colder than 258 K.
    """
    ta = era5_data.surface_temperature.astype(np.float64)

    # Height of each level above the surface, in km. Levels below ground are
    # excluded.
    z = (era5_data.height - era5_data.surface_height[..., np.newaxis]) * 1e-3
    above = z > 0

    # Least-squares lapse rate for T(z) = Ta - gamma * z
    fit = above & (z <= LAPSE_FIT_TOP)
    szz = np.sum(np.where(fit, z * z, 0.0), axis=-1)
    szt = np.sum(np.where(fit, z * (ta[..., np.newaxis] - era5_data.temperature), 0.0), axis=-1)
    with np.errstate(divide="ignore", invalid="ignore"):
        gamma = np.where(szz > 0, szt / szz, DEFAULT_LAPSE_RATE)
    gamma = np.clip(gamma, *VALID_RANGES["lapse_rate"])

    # Surface vapor density in g/m^3, so that WV / rho_v is in km
    vapor_pressure = buck_vap(era5_data.surface_dewpoint).astype(np.float64)
    rho_v = vapor_pressure * 1e2 / (R_VAPOR * ta) * 1e3
    wv = era5_data.columnar_water_vapor.astype(np.float64)
    hwv = np.clip(wv / rho_v, *VALID_RANGES["vapor_scale_height"])

    # Liquid mass per level is proportional to the mixing ratio times the air
    # density, p / T
    weight = np.where(
        above,
        era5_data.liquid_content * era5_data.levels / era5_data.temperature,
        0.0,
    )
    total_weight = np.sum(weight, axis=-1)
    with np.errstate(divide="ignore", invalid="ignore"):
        zcld = np.where(total_weight > 0, np.sum(weight * z, axis=-1) / total_weight, 0.0)
    zcld_max = np.maximum((ta - MIN_CLOUD_TEMPERATURE) / gamma, 0.0)
    zcld = np.minimum(zcld, zcld_max)

    return ProfileSummary(
        era5_data.surface_pressure.astype(np.float32),
        era5_data.columnar_water_vapor.astype(np.float32),
        hwv.astype(np.float32),
        era5_data.surface_temperature.astype(np.float32),
        gamma.astype(np.float32),
        era5_data.columnar_cloud_liquid.astype(np.float32),
        zcld.astype(np.float32),
    )
