import cftime
import numpy as np
import pandas as pd
import pytest

from isimipplus import climatology, load_data


def _masked_table(ds):
    grid = load_data.from_dataset(ds)
    return load_data.mask_sentinel(load_data.to_tabular(grid), grid.variable, grid.sentinel)


def test_climatology_propagates_missing_values(synthetic_dataset):
    df = _masked_table(synthetic_dataset)

    clim = climatology.compute_climatology(climatology.filter_years(df, 2000, 2002), "tas")

    # cell (0, 1): 2, 3, 1
    assert clim.loc[(10.25, 50.75)] == pytest.approx(2.0)
    # cell (1, 1): sentinel, 5, 3
    assert np.isnan(clim.loc[(10.75, 50.75)])
    # cell (0, 0): 1, 2, sentinel
    assert np.isnan(clim.loc[(10.25, 50.25)])
    # cell (1, 0): 3, 4, 2
    assert clim.loc[(10.75, 50.25)] == pytest.approx(3.0)
    assert clim.name == "tas"


def test_filter_years_is_inclusive_on_both_ends(synthetic_dataset):
    df = _masked_table(synthetic_dataset)

    kept = climatology.filter_years(df, 2001, 2002)

    assert sorted(kept["time"].dt.year.unique()) == [2001, 2002]
    assert len(kept) == 8


def test_window_can_drop_the_missing_step(synthetic_dataset):
    df = _masked_table(synthetic_dataset)

    clim = climatology.compute_climatology(climatology.filter_years(df, 2001, 2001), "tas")

    assert clim.loc[(10.75, 50.75)] == pytest.approx(5.0)
    assert clim.notna().all()


def test_filter_years_rejects_inverted_window(synthetic_dataset):
    with pytest.raises(ValueError):
        climatology.filter_years(_masked_table(synthetic_dataset), 2002, 2000)


def test_filter_years_handles_cftime_calendars():
    df = pd.DataFrame(
        {
            "time": [
                cftime.Datetime360Day(1999, 12, 30),
                cftime.Datetime360Day(2000, 1, 1),
                cftime.Datetime360Day(2000, 12, 30),
                cftime.Datetime360Day(2001, 1, 1),
            ],
            "tas": [1.0, 2.0, 3.0, 4.0],
        }
    )

    kept = climatology.filter_years(df, 2000, 2000)

    assert kept["tas"].tolist() == [2.0, 3.0]


def test_climatology_to_grid_pivots_latitude_by_longitude(synthetic_dataset):
    df = _masked_table(synthetic_dataset)
    clim = climatology.compute_climatology(df, "tas")

    grid = climatology.climatology_to_grid(clim)

    assert list(grid.index) == [50.25, 50.75]
    assert list(grid.columns) == [10.25, 10.75]
    assert grid.loc[50.75, 10.25] == pytest.approx(2.0)


def test_climatology_from_file_defaults_to_full_record(synthetic_netcdf):
    clim, grid = climatology.climatology_from_file(synthetic_netcdf)

    assert len(clim) == 4
    assert clim.isna().sum() == 2
    assert grid.variable == "tas"
