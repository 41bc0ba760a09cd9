"""SSM/I frequency channels.

The per-channel coefficient tables in this package are 4-element arrays in
channel order, so channel `n` uses element `n - 1`.
"""

from enum import IntEnum
from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray


class FrequencyChannel(IntEnum):
    """The four SSM/I frequencies, numbered as in the coefficient tables."""

    GHZ_19 = 1
    GHZ_22 = 2
    GHZ_37 = 3
    GHZ_85 = 4

    @property
    def frequency(self) -> float:
        """Channel center frequency in GHz."""
        return float(FREQUENCIES[self.value - 1])


# Center frequencies in GHz, in channel order
FREQUENCIES: NDArray[np.float64] = np.array([19.35, 22.235, 37.0, 85.5])


def channel_index(channel: Union[int, ArrayLike]) -> NDArray[np.intp]:
    """Convert channel numbers (1 to 4) into coefficient table indices."""
    index = np.asarray(channel, dtype=np.intp) - 1
    if np.any((index < 0) | (index >= len(FREQUENCIES))):
        raise ValueError(f"Cannot do RTM for channel {channel}")
    return index


def channel_from_frequency(freq: float, tolerance: float = 0.5) -> FrequencyChannel:
    """Find the channel whose center frequency (GHz) is within `tolerance`."""
    nearest = int(np.argmin(np.abs(FREQUENCIES - freq)))
    if abs(FREQUENCIES[nearest] - freq) > tolerance:
        raise ValueError(f"No SSM/I channel near {freq} GHz")
    return FrequencyChannel(nearest + 1)
