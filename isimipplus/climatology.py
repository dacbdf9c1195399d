"""
Climatologies from flattened grid tables.

A climatology cell is the mean of every value at one (longitude, latitude)
within an inclusive calendar-year window. Missing values are not skipped:
one missing value makes the whole cell missing.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from isimipplus import load_data, utils

log = logging.getLogger(__name__)

GROUP_KEYS = ["longitude", "latitude"]


def filter_years(df: pd.DataFrame, start: int, end: int, time_column: str = "time") -> pd.DataFrame:
    """Keep rows whose calendar year lies in [start, end], both ends included."""
    if start > end:
        raise ValueError(f"start year ({start}) is after end year ({end})")
    years = utils.years_of(df[time_column])
    return df[(years >= start) & (years <= end)]


def compute_climatology(df: pd.DataFrame, column: str) -> pd.Series:
    """
    Per-cell temporal mean of ``column``.

    Any cell with at least one missing value in the window comes out missing.
    """
    grouped = df.groupby(GROUP_KEYS)[column]
    means = grouped.mean()
    has_missing = grouped.count() < grouped.size()
    return means.mask(has_missing).rename(column)


def climatology_to_grid(climatology: pd.Series) -> pd.DataFrame:
    """Pivot a climatology series to a latitude x longitude table."""
    return climatology.unstack("longitude").sort_index().sort_index(axis=1)


def climatology_from_file(
    path: Union[str, Path],
    start: Optional[int] = None,
    end: Optional[int] = None,
    variable: Optional[str] = None,
) -> tuple[pd.Series, load_data.GridDataset]:
    """
    Load, mask, window and average a downloaded netCDF grid.

    A missing ``start`` or ``end`` defaults to the file's first or last year.
    """
    df, grid = load_data.load_tabular(path, variable)
    if start is None or end is None:
        years = utils.years_of(df["time"])
        start = int(years.min()) if start is None else start
        end = int(years.max()) if end is None else end
    window = filter_years(df, start, end)
    if window.empty:
        log.warning("No time steps of %s fall within %d-%d", Path(path).name, start, end)
    climatology = compute_climatology(window, grid.variable)
    log.info(
        "Climatology %d-%d: %d cells, %d missing",
        start,
        end,
        len(climatology),
        int(climatology.isna().sum()),
    )
    return climatology, grid
