import numpy as np
import pandas as pd
import pytest
import xarray as xa

SENTINEL = 1e20

# [lon index][lat index] at each of three yearly time steps
STEPS = [
    [[1.0, 2.0], [3.0, SENTINEL]],
    [[2.0, 3.0], [4.0, 5.0]],
    [[SENTINEL, 1.0], [2.0, 3.0]],
]
LONS = [10.25, 10.75]
LATS = [50.25, 50.75]
TIMES = pd.to_datetime(["2000-07-01", "2001-07-01", "2002-07-01"])


def make_dataset(steps=STEPS, with_fill_attr=True) -> xa.Dataset:
    data = np.stack([np.array(step, dtype="float64") for step in steps], axis=-1)
    attrs = {"units": "K", "long_name": "Near-Surface Air Temperature"}
    if with_fill_attr:
        attrs["_FillValue"] = SENTINEL
    return xa.Dataset(
        {"tas": (("lon", "lat", "time"), data, attrs)},
        coords={"lon": LONS, "lat": LATS, "time": TIMES[: len(steps)]},
    )


@pytest.fixture
def synthetic_dataset() -> xa.Dataset:
    return make_dataset()


@pytest.fixture
def synthetic_netcdf(tmp_path):
    ds = make_dataset(with_fill_attr=False)
    path = tmp_path / "tas_synthetic.nc"
    ds.to_netcdf(path, encoding={"tas": {"_FillValue": SENTINEL}})
    return path
