import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd
from rich import print as rich_print

from isimipplus import api, climatology, config, download, plotting, search, utils
from isimipplus.load_data import GridDataset
from isimipplus.models import SearchResult

log = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    search_result: SearchResult
    downloaded: List[Path] = field(default_factory=list)
    climatology: Optional[pd.Series] = None
    grid: Optional[GridDataset] = None
    years: Optional[tuple[int, int]] = None
    figure: Any = None


def find_netcdf(paths: List[Path]) -> List[Path]:
    """NetCDF files among downloaded files and extraction directories."""
    found = []
    for path in paths:
        if path.is_dir():
            found.extend(sorted(path.rglob("*.nc")))
        elif path.suffix == ".nc":
            found.append(path)
    return found


def run_pipeline(
    search_criteria: dict,
    meta_criteria: Optional[dict] = None,
    api_instance: Optional[api.IsimipAPI] = None,
) -> PipelineResult:
    """
    Search the catalog, optionally cut out a region, download, and map the climatology.

    Recognized ``meta_criteria`` keys:
        data_dir: download directory (default ``data``)
        bbox: [south, north, west, east]; when set a server-side cutout is requested
        poll: seconds between cutout status checks
        validate, extract: passed to the retriever
        variable: data variable to read (default: the only gridded one)
        years: [start, end] inclusive window (default: the whole file)
        bin_width, cmap: contour band width and colormap
        coastline: path/URL of coastline polygons, or null for none
        plots_dir, save_plot, show_plot: where the map goes
    """
    meta_criteria = meta_criteria or {}
    search_results = search.SearchResults(
        search_criteria=search_criteria,
        meta_criteria=meta_criteria,
        api_instance=api_instance,
    )
    files = search_results.run()
    result = PipelineResult(search_result=search_results.search_result)

    if not files:
        rich_print("No files found matching the search criteria.")
        return result

    bbox = meta_criteria.get("bbox")
    if bbox:
        files = [
            search_results.api.cutout(
                search_results.search_result.paths(), bbox, poll=meta_criteria.get("poll", 10)
            )
        ]

    data_dir = meta_criteria.get("data_dir") or search_results.api.data_dir
    retriever = download.Retriever(
        files=files,
        output_dir=data_dir,
        validate=meta_criteria.get("validate", True),
        extract=meta_criteria.get("extract", True),
    )
    result.downloaded = retriever.run()

    nc_files = find_netcdf(result.downloaded)
    if not nc_files:
        log.warning("No netCDF file among %s", [str(p) for p in result.downloaded])
        return result
    if len(nc_files) > 1:
        log.info("Using %s (%d netCDF files downloaded)", nc_files[0].name, len(nc_files))

    start, end = meta_criteria.get("years") or (None, None)
    result.climatology, result.grid = climatology.climatology_from_file(
        nc_files[0], start, end, variable=meta_criteria.get("variable")
    )
    years = utils.years_of(pd.Series(result.grid.time))
    result.years = (
        int(years.min()) if start is None else int(start),
        int(years.max()) if end is None else int(end),
    )

    if not result.climatology.notna().any():
        log.warning(
            "No cell of %s has a complete record in %d-%d; skipping the map",
            result.grid.variable,
            *result.years,
        )
        return result

    output_path = None
    if meta_criteria.get("save_plot", True):
        output_path = (
            Path(meta_criteria.get("plots_dir") or config.plots_dir)
            / f"{result.grid.variable}_climatology_{result.years[0]}-{result.years[1]}.png"
        )
    result.figure, _ = plotting.plot_climatology(
        result.climatology,
        extent=result.grid.extent,
        bin_width=meta_criteria.get("bin_width", 1.0),
        cmap=meta_criteria.get("cmap", "YlOrRd"),
        coastline=meta_criteria.get("coastline", plotting.NATURAL_EARTH_LAND),
        title=f"{result.grid.variable} climatology {result.years[0]}-{result.years[1]}",
        units=result.grid.units,
        output_path=output_path,
        show_plot=meta_criteria.get("show_plot", False),
    )
    return result
