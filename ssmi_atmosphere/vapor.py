"""Water vapor optical depth for the SSM/I channels."""

from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .channels import channel_index

# Column vapor correction factor
WVCOR: NDArray[np.float64] = np.array([1.01, 0.95, 1.06, 0.92])

# Fraction of gamma * HWV subtracted from Ta to get the mean vapor-layer
# temperature
TEMP_OFFSET: NDArray[np.float64] = np.array([0.6, 2.8, 0.2, 0.2])

# Pressure scale height (km) used to get the mean vapor-layer pressure
PRESSURE_SCALE: NDArray[np.float64] = np.array([5.0, 4.9, 6.8, 6.4])

# Mass absorption coefficient terms, in m^2/kg: constant, foreign-broadened
# (times pbar / Tbar), and self-broadened (times vapor density / Tbar). These
# are a three-term fit of this package, not the published Petty (1990) table.
A1: NDArray[np.float64] = np.array([0.4e-3, 4.5e-3, 0.1e-3, 1.0e-3])
A2: NDArray[np.float64] = np.array([0.5e-3, 0.3e-3, 0.5e-3, 2.5e-3])
A3: NDArray[np.float64] = np.array([0.8e-2, 1.2e-2, 1.2e-2, 7.0e-2])


def optical_depth(
    channel: Union[int, ArrayLike],
    p0: ArrayLike,
    wv: ArrayLike,
    hwv: ArrayLike,
    ta: ArrayLike,
    gamma: ArrayLike,
) -> NDArray[np.float64]:
    """Compute the water vapor optical depth at nadir.

    `channel`: SSM/I channel number, 1 to 4

    `p0`: surface pressure in mb

    `wv`: precipitable water in kg/m^2

    `hwv`: water vapor density scale height in km

    `ta`, `gamma`: effective surface air temperature in K and lapse rate in
    K/km, so that T(z) = ta - gamma * z

    The inputs broadcast against each other. The fit is only meaningful over
    the calibration ranges listed in `rtm.VALID_RANGES`.
    """
    i = channel_index(channel)
    p0 = np.asarray(p0, dtype=np.float64)
    hwv = np.asarray(hwv, dtype=np.float64)
    ta = np.asarray(ta, dtype=np.float64)
    gamma = np.asarray(gamma, dtype=np.float64)

    wvc = np.asarray(wv, dtype=np.float64) * WVCOR[i]
    pbar = p0 / (1.0 + hwv / PRESSURE_SCALE[i])
    otbar = 1.0 / (ta - TEMP_OFFSET[i] * gamma * hwv)
    # Mean vapor density in g/m^3
    voh = wvc / hwv

    return wvc * (A1[i] + A2[i] * pbar * otbar + A3[i] * voh * otbar)
