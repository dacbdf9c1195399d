#!/usr/bin/env python3
"""
Gridded netCDF loading for downloaded ISIMIP files.

This module provides functionality to:
1. Open a netCDF grid with its sentinel ("no data") value left visible
2. Flatten the grid into one row per (longitude, latitude, time) cell
3. Replace sentinel values in the flattened table with explicit missing markers
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd
import xarray as xa

from isimipplus import utils

log = logging.getLogger(__name__)

# CF / ISIMIP convention for missing values
DEFAULT_SENTINEL = 1e20
DIMS = ("longitude", "latitude", "time")


def get_sentinel(da: xa.DataArray, default: float = DEFAULT_SENTINEL) -> float:
    """Declared no-data value of a variable (``_FillValue``, then ``missing_value``)."""
    for source in (da.attrs, da.encoding):
        for key in ("_FillValue", "missing_value"):
            value = source.get(key)
            if value is not None:
                return float(np.ravel(value)[0])
    log.warning("%s declares no fill value, assuming %g", da.name, default)
    return default


@dataclass
class GridDataset:
    """A (longitude, latitude, time) grid with its declared sentinel."""
    data: xa.DataArray
    variable: str
    sentinel: float

    @property
    def longitude(self) -> np.ndarray:
        return self.data["longitude"].values

    @property
    def latitude(self) -> np.ndarray:
        return self.data["latitude"].values

    @property
    def time(self) -> np.ndarray:
        return self.data["time"].values

    @property
    def units(self) -> str:
        return self.data.attrs.get("units", "")

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(south, north, west, east) of the grid's cell centres."""
        return (
            float(self.latitude.min()),
            float(self.latitude.max()),
            float(self.longitude.min()),
            float(self.longitude.max()),
        )

    def __repr__(self) -> str:
        shape = "x".join(str(self.data.sizes[d]) for d in self.data.dims)
        return f"GridDataset(variable={self.variable}, shape={shape}, sentinel={self.sentinel:g})"


def _pick_variable(ds: xa.Dataset, variable: Optional[str]) -> str:
    if variable is not None:
        if variable not in ds.data_vars:
            raise ValueError(
                f"Variable {variable!r} not in dataset (available: {sorted(ds.data_vars)})"
            )
        return variable
    data_vars = [v for v in ds.data_vars if set(DIMS) <= set(ds[v].dims)]
    if len(data_vars) != 1:
        raise ValueError(
            f"Cannot choose a gridded variable among {sorted(ds.data_vars)}; pass variable="
        )
    return data_vars[0]


def from_dataset(ds: xa.Dataset, variable: Optional[str] = None) -> GridDataset:
    """Wrap an already opened dataset (raw values, not masked) as a GridDataset."""
    ds = utils.process_xa_d(ds)
    variable = _pick_variable(ds, variable)
    da = ds[variable]
    missing_dims = [d for d in DIMS if d not in da.dims]
    if missing_dims:
        raise ValueError(f"{variable} is missing dimension(s) {missing_dims}")
    return GridDataset(
        data=da.transpose(*DIMS, ...),
        variable=variable,
        sentinel=get_sentinel(da),
    )


def open_grid(path: Union[str, Path], variable: Optional[str] = None) -> GridDataset:
    """
    Open a netCDF file as a GridDataset.

    Scaling and masking are disabled so values at the sentinel reach
    ``mask_sentinel`` unchanged.
    """
    path = Path(path)
    ds = xa.open_dataset(path, mask_and_scale=False, decode_times=True)
    grid = from_dataset(ds, variable)
    log.info("Opened %s: %r", path.name, grid)
    return grid


def to_tabular(grid: GridDataset) -> pd.DataFrame:
    """
    Flatten the grid into rows of (longitude, latitude, time, value).

    Every cell becomes a row, sentinel or not, so the row count always
    equals the grid's cell count.
    """
    df = grid.data.to_dataframe(name=grid.variable).reset_index()
    return df[list(DIMS) + [grid.variable]]


def mask_sentinel(df: pd.DataFrame, column: str, sentinel: float) -> pd.DataFrame:
    """
    Replace values at or above ``sentinel`` with NaN.

    Values strictly below the sentinel pass through; row count and order
    are preserved.
    """
    masked = df.copy()
    values = masked[column].astype(float)
    masked[column] = values.where(values < sentinel)
    return masked


def load_tabular(path: Union[str, Path], variable: Optional[str] = None) -> Tuple[pd.DataFrame, GridDataset]:
    """Open, flatten and mask a netCDF grid in one go."""
    grid = open_grid(path, variable)
    df = mask_sentinel(to_tabular(grid), grid.variable, grid.sentinel)
    n_missing = int(df[grid.variable].isna().sum())
    log.info("%d of %d cells carry no data", n_missing, len(df))
    return df, grid
