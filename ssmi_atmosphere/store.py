"""Write data slices into existing netCDF variables.

Each variable has a leading time dimension. A slice is the data for one time
index. Its shape must match the variable's remaining dimensions exactly.
"""

from enum import Enum
from pathlib import Path
from typing import Union

import numpy as np
from netCDF4 import Dataset
from numpy.typing import ArrayLike


class ArrayStoreError(Exception):
    """A slice could not be written."""


class DimensionMismatch(ArrayStoreError):
    """The slice shape or time index disagrees with the declared dimensions."""


class UnsupportedPrecision(ArrayStoreError):
    """The variable is stored as neither single nor double precision float."""


class Precision(Enum):
    """Floating-point precision of the data held in memory."""

    SINGLE = "single"
    DOUBLE = "double"

    @property
    def dtype(self) -> np.dtype:
        """The numpy dtype for this precision."""
        if self is Precision.SINGLE:
            return np.dtype(np.float32)
        return np.dtype(np.float64)


SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def write_slice(
    path: Union[str, Path],
    variable_name: str,
    data: ArrayLike,
    time_index: int,
    precision: Precision = Precision.SINGLE,
) -> None:
    """Write one time slice of a variable in an existing netCDF file.

    The data are interpreted with the in-memory `precision` and then
    converted to the stored precision of the variable. All checks are done
    before anything is written, so on failure the file is left unmodified.
    """
    values = np.asarray(data, dtype=precision.dtype)

    with Dataset(path, "a") as f:
        try:
            v = f.variables[variable_name]
        except KeyError:
            raise ArrayStoreError(f"No variable named {variable_name} in {path}")

        if v.ndim != values.ndim + 1 or v.shape[1:] != values.shape:
            raise DimensionMismatch(
                f"Variable {variable_name} has shape {v.shape[1:]} per time step, "
                f"but the data has shape {values.shape}"
            )

        num_time = len(f.dimensions[v.dimensions[0]])
        if not 0 <= time_index < num_time:
            raise DimensionMismatch(
                f"Time index {time_index} is outside the {num_time} declared "
                f"time steps of {variable_name}"
            )

        if v.dtype not in SUPPORTED_DTYPES:
            raise UnsupportedPrecision(
                f"Variable {variable_name} is stored as {v.dtype}"
            )

        v[time_index, ...] = values.astype(v.dtype, copy=False)
