import pytest

from isimipplus import api as api_mod
from isimipplus import search


class DummyClient:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def datasets(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


RESPONSE = {
    "count": 2,
    "results": [
        {
            "name": "gfdl-esm4_historical_tas",
            "specifiers": {"climate_forcing": "gfdl-esm4", "climate_variable": "tas"},
            "files": [
                {"file_url": "https://files.isimip.org/a/tas_1.nc", "path": "a/tas_1.nc"},
                {"file_url": "https://files.isimip.org/a/tas_2.nc", "path": "a/tas_2.nc"},
            ],
        },
        {
            "name": "ukesm1-0-ll_historical_tas",
            "specifiers": {"climate_forcing": "ukesm1-0-ll", "climate_variable": "tas"},
            "files": [
                {"file_url": "https://files.isimip.org/b/tas_1.nc", "path": "b/tas_1.nc"},
            ],
        },
    ],
}


def _search_results(response=RESPONSE, criteria=None):
    client = DummyClient(response)
    results = search.SearchResults(
        search_criteria=criteria or {"simulation_round": "ISIMIP3b", "variable": "tas"},
        api_instance=api_mod.IsimipAPI(client=client),
    )
    return results, client


@pytest.mark.parametrize(
    "kwargs",
    [{"search_criteria": "ISIMIP3b"}, {"meta_criteria": ["data"]}],
)
def test_criteria_must_be_dicts(kwargs):
    with pytest.raises(TypeError):
        search.SearchResults(**kwargs)


def test_run_returns_every_file_reference_in_order():
    results, client = _search_results()

    files = results.run()

    assert client.calls == [{"simulation_round": "ISIMIP3b", "climate_variable": "tas"}]
    assert [f.path for f in files] == ["a/tas_1.nc", "a/tas_2.nc", "b/tas_1.nc"]


def test_results_dataframe_has_one_row_per_file():
    results, _ = _search_results()

    results.do_search()

    df = results.results_df
    assert len(df) == 3
    assert list(df["climate_forcing"]) == ["gfdl-esm4", "gfdl-esm4", "ukesm1-0-ll"]
    assert list(df["filename"]) == ["tas_1.nc", "tas_2.nc", "tas_1.nc"]


def test_empty_search_yields_no_files():
    results, _ = _search_results(response={"count": 0, "results": []})

    assert results.run() == []
    assert results.results_df.empty
    assert results.search_result.count == 0
