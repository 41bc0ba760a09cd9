"""Tests for the effective emission heights."""

import numpy as np
import pytest

from ssmi_atmosphere.effht import effective_heights

# Dry air and vapor scale heights (km) and optical depths
HO = 5.07
HV = 1.24
SIGO = 0.048
SIGV = 0.045


def brute_force_heights(ho, hv, sigo, sigv, mu, top, num=1_000_000):
    """Weighted mean emission heights from a fine midpoint sum."""
    dz = top / num
    z = (np.arange(num) + 0.5) * dz
    k = sigo / ho * np.exp(-z / ho) + sigv / hv * np.exp(-z / hv)
    # Optical depth from the surface to z, and from z to the layer top
    t = sigo * (1 - np.exp(-z / ho)) + sigv * (1 - np.exp(-z / hv))
    t_top = sigo * (1 - np.exp(-top / ho)) + sigv * (1 - np.exp(-top / hv))
    w_dn = k * np.exp(-mu * t)
    w_up = k * np.exp(-mu * (t_top - t))
    return np.sum(z * w_dn) / np.sum(w_dn), np.sum(z * w_up) / np.sum(w_up)


class TestEffectiveHeights:
    """Tests for the effective emission height integrals."""

    @pytest.mark.parametrize("mu", [1.0, 1.66, 4.0])
    def test_layer_matches_brute_force(self, mu):
        """The cloud layer heights match a direct numerical integral."""
        heights = effective_heights(HO, HV, SIGO, SIGV, mu, 2.0)
        dn, up = brute_force_heights(HO, HV, SIGO, SIGV, mu, 2.0)
        assert np.isclose(heights.dn, dn, rtol=1e-5)
        assert np.isclose(heights.up, up, rtol=1e-5)

    @pytest.mark.parametrize("mu", [1.0, 1.66, 4.0])
    def test_atmosphere_matches_brute_force(self, mu):
        """The whole-atmosphere heights match a direct numerical integral."""
        heights = effective_heights(HO, HV, SIGO, SIGV, mu, 1.0)
        dn, up = brute_force_heights(HO, HV, SIGO, SIGV, mu, 150.0)
        assert np.isclose(heights.dn_inf, dn, rtol=1e-4)
        assert np.isclose(heights.up_inf, up, rtol=1e-4)

    def test_downwelling_below_upwelling(self):
        """Downwelling emission comes from lower in the layer."""
        heights = effective_heights(HO, HV, SIGO, SIGV, 1.66, 1.5)
        assert 0 < heights.dn < heights.up < 1.5
        assert 0 < heights.dn_inf < heights.up_inf

    def test_thin_limit(self):
        """With negligible attenuation, both heights are the absorber mean."""
        heights = effective_heights(HO, HV, SIGO, SIGV, 1e-9, 1.0)
        mean = (SIGO * HO + SIGV * HV) / (SIGO + SIGV)
        assert np.isclose(heights.dn_inf, mean, rtol=1e-4)
        assert np.isclose(heights.up_inf, mean, rtol=1e-4)
        assert np.isclose(heights.dn, heights.up, rtol=1e-6)

    def test_zero_cloud_height(self):
        """An empty layer has zero height rather than NaN."""
        heights = effective_heights(HO, HV, SIGO, SIGV, 1.0, 0.0)
        assert heights.dn == 0.0
        assert heights.up == 0.0
        assert np.isfinite(heights.dn_inf)

    def test_opaque_downwelling_near_surface(self):
        """At grazing angles the downwelling emission is from near the surface."""
        mus = np.array([1.0, 10.0, 100.0, 1000.0])
        heights = effective_heights(HO, HV, SIGO, SIGV, mus, 1.0)
        assert np.all(np.diff(heights.dn_inf) < 0)
        assert np.all(np.diff(heights.dn) < 0)
        assert heights.dn_inf[-1] < 0.05

    def test_broadcasting(self):
        """Array inputs give the same values as scalar inputs."""
        zcld = np.array([0.5, 1.0, 2.0])
        heights = effective_heights(HO, HV, SIGO, SIGV, 1.5, zcld)
        assert heights.dn.shape == (3,)
        for i, z in enumerate(zcld):
            single = effective_heights(HO, HV, SIGO, SIGV, 1.5, z)
            assert np.isclose(heights.dn[i], single.dn)
            assert np.isclose(heights.up_inf[i], single.up_inf)
