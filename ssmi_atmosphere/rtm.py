"""Compute the atmospheric contribution to SSM/I brightness temperatures.

This is a closed-form parametric model for the four SSM/I frequencies. The
atmosphere is described by a handful of scalars: surface pressure, column
water vapor and its scale height, a linear temperature profile, and an
optional isothermal cloud slab. The clear-sky part comes from effective
emission heights (see `effht`). The cloud is inserted between the layer below
it and the layer above it.
"""

import warnings
from typing import Dict, NamedTuple, Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .channels import channel_index
from .effht import effective_heights
from .vapor import optical_depth

# Dry air optical depth fit: b1 + b2 * P0 + b3 / Tbar
B1: NDArray[np.float64] = np.array([-0.46847e-1, -0.57752e-1, -0.18885, -0.10990])
B2: NDArray[np.float64] = np.array([0.26640e-4, 0.31662e-4, 0.9832e-4, 0.60531e-4])
B3: NDArray[np.float64] = np.array([0.87560e1, 0.10961e2, 0.36678e2, 0.37578e2])

# Height (km) of the "mean" temperature used for the dry air optical depth
ZETA: NDArray[np.float64] = np.array([4.2, 4.2, 4.2, 2.9])

# Vapor absorber scale height is c * HWV
C: NDArray[np.float64] = np.array([0.9207, 1.208, 0.8253, 0.8203])

# Dry air absorber scale height fit: d1 + d2 * Ta + d3 * gamma
D1: NDArray[np.float64] = np.array([-0.35908e1, -0.38921e1, -0.43072e1, -0.17020])
D2: NDArray[np.float64] = np.array([0.29797e-1, 0.31054e-1, 0.32801e-1, 0.13610e-1])
D3: NDArray[np.float64] = np.array([-0.23174e-1, -0.23543e-1, -0.24101e-1, -0.15776])

# Cloud liquid mass absorption coefficient, cubic in the cloud temperature in
# degrees Celsius
KW0: NDArray[np.float64] = np.array([0.786e-1, 0.103, 0.267, 0.988])
KW1: NDArray[np.float64] = np.array([-0.230e-2, -0.296e-2, -0.673e-2, 0.107e-2])
KW2: NDArray[np.float64] = np.array([0.448e-4, 0.557e-4, 0.975e-4, -0.535e-4])
KW3: NDArray[np.float64] = np.array([-0.464e-6, -0.558e-6, -0.724e-6, 0.115e-5])

# 2 / pi
TWO_OVER_PI = 0.636619

T_KELVIN = 273.15

# Calibration ranges of the fit, as (min, max)
VALID_RANGES: Dict[str, Tuple[float, float]] = {
    "incidence_angle": (0.0, 90.0),
    "surface_pressure": (940.0, 1030.0),
    "water_vapor": (0.0, 70.0),
    "vapor_scale_height": (0.5, 3.0),
    "air_temperature": (263.0, 303.0),
    "lapse_rate": (4.0, 6.5),
    "liquid_water": (0.0, 3.0),
}

# The cloud should be warmer than this, in K
MIN_CLOUD_TEMPERATURE = 258.0


class AtmoParameters(NamedTuple):
    """Atmospheric radiative parameters.

    This is the output of the RTM.
    """

    # Transmissivity, from 0 to 1
    tran: NDArray[np.floating]
    # Upwelling TB, in K
    tb_up: NDArray[np.floating]
    # Downwelling TB, in K
    tb_down: NDArray[np.floating]


class RangeWarning(UserWarning):
    """An input is outside the calibration range of the model."""


def check_ranges(
    incidence_angle: Optional[ArrayLike] = None,
    surface_pressure: Optional[ArrayLike] = None,
    water_vapor: Optional[ArrayLike] = None,
    vapor_scale_height: Optional[ArrayLike] = None,
    air_temperature: Optional[ArrayLike] = None,
    lapse_rate: Optional[ArrayLike] = None,
    liquid_water: Optional[ArrayLike] = None,
    cloud_height: Optional[ArrayLike] = None,
) -> int:
    """Warn about inputs outside the calibration ranges.

    A `RangeWarning` is issued for each input that has any value out of range.
    The incidence angle must be strictly less than 90 degrees. The cloud
    temperature is checked only if the air temperature, lapse rate, and cloud
    height are all given. Returns the number of warnings issued.
    """
    given = {
        "incidence_angle": incidence_angle,
        "surface_pressure": surface_pressure,
        "water_vapor": water_vapor,
        "vapor_scale_height": vapor_scale_height,
        "air_temperature": air_temperature,
        "lapse_rate": lapse_rate,
        "liquid_water": liquid_water,
    }

    num_warnings = 0
    for name, value in given.items():
        if value is None:
            continue
        lo, hi = VALID_RANGES[name]
        a = np.asarray(value)
        if name == "incidence_angle":
            bad = (a < lo) | (a >= hi)
        else:
            bad = (a < lo) | (a > hi)
        if np.any(bad):
            warnings.warn(
                f"{np.count_nonzero(bad)} {name} value(s) outside [{lo}, {hi}]",
                RangeWarning,
                stacklevel=2,
            )
            num_warnings += 1

    if cloud_height is not None and air_temperature is not None and lapse_rate is not None:
        tcld = np.asarray(air_temperature) - np.asarray(lapse_rate) * np.asarray(
            cloud_height
        )
        bad = (np.asarray(cloud_height) < 0) | (tcld < MIN_CLOUD_TEMPERATURE)
        if np.any(bad):
            warnings.warn(
                f"{np.count_nonzero(bad)} cloud height value(s) give a cloud "
                f"colder than {MIN_CLOUD_TEMPERATURE} K or are negative",
                RangeWarning,
                stacklevel=2,
            )
            num_warnings += 1

    return num_warnings


def compute_channel(
    channel: Union[int, ArrayLike],
    incidence_angle: ArrayLike,
    surface_pressure: ArrayLike,
    water_vapor: ArrayLike,
    vapor_scale_height: ArrayLike,
    air_temperature: ArrayLike,
    lapse_rate: ArrayLike,
    liquid_water: ArrayLike,
    cloud_height: ArrayLike,
) -> AtmoParameters:
    """Compute the atmospheric TBs and transmittance.

    `channel`: SSM/I channel number, 1 to 4 (19.35, 22.235, 37.0, 85.5 GHz)

    `incidence_angle`: Earth incidence angle in degrees, less than 90

    `surface_pressure`: surface pressure in mb

    `water_vapor`: precipitable water in kg/m^2

    `vapor_scale_height`: water vapor density scale height in km

    `air_temperature`, `lapse_rate`: effective surface air temperature in K
    and lapse rate in K/km. The temperature profile is
    T(z) = air_temperature - lapse_rate * z

    `liquid_water`: cloud liquid water in kg/m^2

    `cloud_height`: effective cloud height in km

    The inputs broadcast against each other and the outputs are float64. There
    is no input checking here (see `check_ranges`). Values outside the
    calibration ranges give degraded results rather than errors.
    """
    i = channel_index(channel)
    theta = np.asarray(incidence_angle, dtype=np.float64)
    p0 = np.asarray(surface_pressure, dtype=np.float64)
    wv = np.asarray(water_vapor, dtype=np.float64)
    hwv = np.asarray(vapor_scale_height, dtype=np.float64)
    ta = np.asarray(air_temperature, dtype=np.float64)
    gamma = np.asarray(lapse_rate, dtype=np.float64)
    lw = np.asarray(liquid_water, dtype=np.float64)
    zcld = np.asarray(cloud_height, dtype=np.float64)

    # Secant of the incidence angle
    mu = 1.0 / np.cos(np.deg2rad(theta))

    sigv = optical_depth(channel, p0, wv, hwv, ta, gamma)

    # Dry air optical depth, using one over the "mean" temperature
    otbar = 1.0 / (ta - gamma * ZETA[i])
    sigo = B1[i] + B2[i] * p0 + B3[i] * otbar

    # The cloud is an isothermal slab
    tcld = ta - gamma * zcld
    tc = tcld - T_KELVIN
    sigcld = (KW0[i] + tc * (KW1[i] + tc * (KW2[i] + tc * KW3[i]))) * lw
    taucld = np.exp(-mu * sigcld)
    tbcld = (1.0 - taucld) * tcld

    # Effective absorber scale heights for vapor and dry air
    hv = C[i] * hwv
    ho = D1[i] + D2[i] * ta + D3[i] * gamma

    heights = effective_heights(ho, hv, sigo, sigv, mu, zcld)

    # Optical depths and transmittances: layer one is below the cloud, layer
    # two is above it
    sig = sigo + sigv
    sig1 = -sigo * np.expm1(-zcld / ho) - sigv * np.expm1(-zcld / hv)
    tau = np.exp(-mu * sig)
    tau1 = np.exp(-mu * sig1)
    tau2 = tau / tau1

    em1 = 1.0 - tau1
    em = 1.0 - tau

    teff1dn = ta - gamma * heights.dn
    teff1up = ta - gamma * heights.up
    teffdn = ta - gamma * heights.dn_inf
    teffup = ta - gamma * heights.up_inf

    tbclrdn = teffdn * em
    tbclrup = teffup * em

    # Split the clear-sky TBs into layer one and layer two
    tb1dn = em1 * teff1dn
    tb1up = em1 * teff1up
    tb2dn = (tbclrdn - tb1dn) / tau1
    tb2up = tbclrup - tau2 * tb1up

    tbdn = tb1dn + tau1 * (tbcld + taucld * tb2dn)
    tbup = tb2up + tau2 * (tbcld + taucld * tb1up)
    tauatm = tau * taucld

    # Ad hoc correction for large angles and/or high gaseous opacities. It is
    # only applied to the downwelling TB.
    alph = (TWO_OVER_PI * np.arctan(mu * sig)) ** 2
    tbdn = (1.0 - alph) * tbdn + em * alph * ta

    return AtmoParameters(tauatm, tbup, tbdn)


def compute(
    surface_pressure: NDArray[np.floating],
    water_vapor: NDArray[np.floating],
    vapor_scale_height: NDArray[np.floating],
    air_temperature: NDArray[np.floating],
    lapse_rate: NDArray[np.floating],
    liquid_water: NDArray[np.floating],
    cloud_height: NDArray[np.floating],
    incidence_angle: NDArray[np.floating],
    channel: NDArray[np.integer],
    check_inputs: bool = True,
) -> AtmoParameters:
    """Compute the RTM for many profiles and channels.

    This is a wrapper around `compute_channel` that ensures all the inputs
    have consistent and expected shapes.

    The following are profile summaries and have shape (`num_points`, ):

    `surface_pressure`: surface pressure in mb

    `water_vapor`: precipitable water in kg/m^2

    `vapor_scale_height`: water vapor density scale height in km

    `air_temperature`: effective surface air temperature in K

    `lapse_rate`: temperature lapse rate in K/km

    `liquid_water`: cloud liquid water in kg/m^2

    `cloud_height`: effective cloud height in km

    The following are RTM parameters and have shape (`num_freq`, ):

    `incidence_angle`: Earth incidence angle in degrees

    `channel`: SSM/I channel number, 1 to 4

    The returned atmospheric parameters are each float32 and dimensioned as
    (`num_points`, `num_freq`). If `check_inputs` is set, out-of-range inputs
    are reported with `RangeWarning`.
    """
    profiles = (
        surface_pressure,
        water_vapor,
        vapor_scale_height,
        air_temperature,
        lapse_rate,
        liquid_water,
        cloud_height,
    )
    if surface_pressure.ndim != 1 or incidence_angle.ndim != 1:
        raise Exception("Unexpected input shapes")

    num_points = len(surface_pressure)
    num_freq = len(incidence_angle)

    if not all(a.shape == (num_points,) for a in profiles) or not all(
        a.shape == (num_freq,) for a in (incidence_angle, channel)
    ):
        raise Exception("Unexpected input shapes")

    if check_inputs:
        check_ranges(
            incidence_angle,
            surface_pressure,
            water_vapor,
            vapor_scale_height,
            air_temperature,
            lapse_rate,
            liquid_water,
            cloud_height,
        )

    # Profiles go along the first axis and channels along the second
    tran, tb_up, tb_down = compute_channel(
        channel[np.newaxis, :],
        incidence_angle[np.newaxis, :],
        *(a[:, np.newaxis] for a in profiles),
    )

    return AtmoParameters(
        tran.astype(np.float32), tb_up.astype(np.float32), tb_down.astype(np.float32)
    )
