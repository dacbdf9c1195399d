from typing import Optional

import numpy as np
import pandas as pd
import xarray as xa
import cftime


def years_of(times: pd.Series | pd.Index) -> np.ndarray:
    """
    Calendar year of each time value.

    Handles numpy/pandas datetimes as well as cftime objects (non-standard
    calendars such as 360_day or noleap that xarray leaves undecoded).
    """
    values = pd.Series(times)
    if pd.api.types.is_datetime64_any_dtype(values):
        return values.dt.year.to_numpy()
    return np.array(
        [t.year if isinstance(t, cftime.datetime) else pd.Timestamp(t).year for t in values]
    )


def process_xa_d(
    xa_d: xa.Dataset | xa.DataArray,
    rename_mapping: dict = {
        "lat": "latitude",
        "lon": "longitude",
        "x": "longitude",
        "y": "latitude",
    },
    squeeze_coords: Optional[str | list[str]] = None,
):
    """
    Standardize coordinate names, drop bounds variables and sort coordinates.

    Args:
        xa_d: xarray Dataset or DataArray to process
        rename_mapping: Mapping of coordinate names to new names
        squeeze_coords: Dimensions to squeeze

    Returns:
        Processed xarray Dataset or DataArray
    """
    temp_xa_d = xa_d.copy()

    # Rename coordinates using mapping if present
    rename_dict = {}
    for coord, new_coord in rename_mapping.items():
        if coord in temp_xa_d.coords and new_coord not in temp_xa_d.coords:
            if new_coord not in rename_dict.values():
                rename_dict[coord] = new_coord
    if rename_dict:
        temp_xa_d = temp_xa_d.rename(rename_dict)

    # Squeeze singleton 'band' dim and any user-specified dims
    if "band" in temp_xa_d.dims:
        temp_xa_d = temp_xa_d.squeeze("band")
    if squeeze_coords:
        temp_xa_d = temp_xa_d.squeeze(squeeze_coords)

    # Drop non-data variables if present
    drop_vars = [
        v
        for v in ["time_bnds", "time_bounds", "lat_bnds", "lon_bnds"]
        if v in getattr(temp_xa_d, "variables", {})
    ]
    if drop_vars and isinstance(temp_xa_d, xa.Dataset):
        temp_xa_d = temp_xa_d.drop_vars(drop_vars)

    # Sort by all dims that carry coordinates
    return temp_xa_d.sortby([d for d in temp_xa_d.dims if d in temp_xa_d.coords])
