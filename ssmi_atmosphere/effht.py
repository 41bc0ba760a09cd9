"""Effective emission heights for an exponential two-absorber atmosphere.

The dry air and water vapor absorption coefficients fall off with height as

    k(z) = (sigma_o / Ho) exp(-z / Ho) + (sigma_v / Hv) exp(-z / Hv)

so that their vertical integrals are the optical depths sigma_o and sigma_v.
The effective emission height of a layer is the mean height weighted by the
emission reaching the observer, mu * k(z) * exp(-mu * t), where t is the
optical depth between z and the observer. For downwelling emission the
observer is at the bottom of the layer, and for upwelling emission it is at
the top.

Integrating by parts leaves a single integral of the layer transmittance,
which is evaluated with Gauss-Legendre quadrature. For a linear temperature
profile, the layer TB is then exactly (1 - tau) * T(h).
"""

from typing import NamedTuple, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Gauss-Legendre quadrature on [0, 1]
NUM_NODES = 48
_points, _weights = np.polynomial.legendre.leggauss(NUM_NODES)
NODES: NDArray[np.float64] = 0.5 * (_points + 1)
WEIGHTS: NDArray[np.float64] = 0.5 * _weights


class EffectiveHeights(NamedTuple):
    """Effective emission heights, in km."""

    # Layer from the surface to the cloud, downwelling and upwelling
    dn: NDArray[np.float64]
    up: NDArray[np.float64]
    # Entire atmosphere, downwelling and upwelling
    dn_inf: NDArray[np.float64]
    up_inf: NDArray[np.float64]


def _depth_above(
    z: NDArray[np.float64],
    ho: NDArray[np.float64],
    hv: NDArray[np.float64],
    sigo: NDArray[np.float64],
    sigv: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Optical depth between height z and the top of the atmosphere."""
    return sigo * np.exp(-z / ho) + sigv * np.exp(-z / hv)


def _layer_heights(
    dz: NDArray[np.float64],
    depth: NDArray[np.float64],
    mu: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Downwelling and upwelling heights from quadrature over a layer.

    `dz` holds the quadrature weights in km, along the last axis.
    `depth` is the optical depth from the bottom of the layer to each node,
    and its final element along the last axis is the depth of the whole layer.
    """
    layer_depth = depth[..., -1:]
    # Optical depth from each node to the top of the layer
    rest = layer_depth - depth

    # The downwelling integral is of exp(-mu t) - exp(-mu t_layer), and the
    # upwelling one of 1 - exp(-mu (t_layer - t))
    up = -np.expm1(-mu * rest[..., :-1])
    dn = np.exp(-mu * depth[..., :-1]) * up
    emissivity = -np.expm1(-mu[..., 0] * layer_depth[..., 0])

    with np.errstate(divide="ignore", invalid="ignore"):
        hdn = np.where(emissivity > 0, np.sum(dn * dz, axis=-1) / emissivity, 0.0)
        hup = np.where(emissivity > 0, np.sum(up * dz, axis=-1) / emissivity, 0.0)
    return hdn, hup


def effective_heights(
    ho: ArrayLike,
    hv: ArrayLike,
    sigo: ArrayLike,
    sigv: ArrayLike,
    mu: ArrayLike,
    zcld: ArrayLike,
) -> EffectiveHeights:
    """Compute the effective emission heights.

    `ho`, `hv`: absorber scale heights in km for dry air and water vapor

    `sigo`, `sigv`: nadir optical depths for dry air and water vapor

    `mu`: secant of the incidence angle

    `zcld`: cloud height in km, which is the top of layer one

    The inputs broadcast against each other. A layer with zero optical depth
    (e.g., `zcld` = 0) has zero height.
    """
    ho, hv, sigo, sigv, mu, zcld = np.broadcast_arrays(
        *(np.asarray(a, dtype=np.float64) for a in (ho, hv, sigo, sigv, mu, zcld))
    )
    # Quadrature runs along a new last axis
    ho, hv, sigo, sigv, mu, zcld = (
        a[..., np.newaxis] for a in (ho, hv, sigo, sigv, mu, zcld)
    )
    sig = sigo + sigv

    # Layer one: linear in height, with the layer top appended as a last node
    z = zcld * np.append(NODES, 1.0)
    dz = zcld * WEIGHTS
    depth = sig - _depth_above(z, ho, hv, sigo, sigv)
    hdn, hup = _layer_heights(dz, depth, mu)

    # Entire atmosphere: substitute z = -L ln(u) with L the larger scale
    # height, so that u runs from 1 at the surface to 0 at the top
    scale = np.maximum(ho, hv)
    z = -scale * np.log(NODES)
    dz = scale * WEIGHTS / NODES
    depth = np.concatenate(
        [sig - _depth_above(z, ho, hv, sigo, sigv), sig], axis=-1
    )
    hdninf, hupinf = _layer_heights(dz, depth, mu)

    return EffectiveHeights(hdn, hup, hdninf, hupinf)
