"""
Map rendering for climatologies.

Filled contour bands at a fixed bin width on a sequential colormap, with a
coastline boundary clipped to the data's extent drawn on top.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from isimipplus.climatology import climatology_to_grid

log = logging.getLogger(__name__)

# Natural Earth 1:110m land polygons
NATURAL_EARTH_LAND = "https://naciscdn.org/naturalearth/110m/physical/ne_110m_land.zip"


def contour_levels(values: Union[np.ndarray, Sequence[float]], bin_width: float) -> np.ndarray:
    """Band edges ``bin_width`` apart, aligned to multiples of it, covering the finite values."""
    if bin_width <= 0:
        raise ValueError(f"bin_width must be positive, got {bin_width}")
    finite = np.asarray(values, dtype=float)
    finite = finite[np.isfinite(finite)]
    if finite.size == 0:
        raise ValueError("No finite values to contour.")
    low = np.floor(finite.min() / bin_width) * bin_width
    high = (np.floor(finite.max() / bin_width) + 1) * bin_width
    return np.arange(low, high + bin_width / 2, bin_width)


def load_coastline(source=NATURAL_EARTH_LAND):
    """Read coastline polygons from a path or URL (anything ``geopandas.read_file`` accepts)."""
    import geopandas as gpd

    log.info("Reading coastline from %s", source)
    return gpd.read_file(source)


def clip_coastline(coastline, extent: Tuple[float, float, float, float]):
    """Restrict coastline geometries to (south, north, west, east)."""
    import geopandas as gpd

    south, north, west, east = extent
    if coastline.crs is not None and coastline.crs.to_epsg() != 4326:
        coastline = coastline.to_crs("EPSG:4326")
    return gpd.clip(coastline, (west, south, east, north))


def plot_climatology(
    climatology: pd.Series,
    extent: Optional[Tuple[float, float, float, float]] = None,
    bin_width: float = 1.0,
    cmap: str = "YlOrRd",
    coastline=None,
    title: Optional[str] = None,
    units: str = "",
    output_path: Optional[Union[str, Path]] = None,
    show_plot: bool = False,
):
    """
    Draw a climatology as filled contour bands with a coastline overlay.

    Args:
        climatology: values indexed by (longitude, latitude), as returned by
            ``compute_climatology``
        extent: (south, north, west, east) to frame and clip the coastline to;
            defaults to the climatology's own coordinate range
        bin_width: width of each contour band, in data units
        cmap: sequential matplotlib colormap name
        coastline: GeoDataFrame, or a path/URL to read one from; None draws no coastline
        title: figure title, defaults to the series name
        units: colorbar label suffix
        output_path: where to save the figure (None = don't save)
        show_plot: whether to call ``plt.show()``

    Returns:
        (fig, ax)
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for plotting. Install with: pip install matplotlib"
        )

    grid = climatology_to_grid(climatology)
    lons = grid.columns.to_numpy(dtype=float)
    lats = grid.index.to_numpy(dtype=float)
    values = np.ma.masked_invalid(grid.to_numpy(dtype=float))
    if extent is None:
        extent = (lats.min(), lats.max(), lons.min(), lons.max())
    south, north, west, east = extent

    levels = contour_levels(values.compressed(), bin_width)

    fig, ax = plt.subplots(figsize=(10, 8))
    filled = ax.contourf(lons, lats, values, levels=levels, cmap=cmap)
    label = climatology.name or ""
    cbar = fig.colorbar(filled, ax=ax, shrink=0.8)
    cbar.set_label(f"{label} [{units}]" if units else str(label))

    if coastline is not None:
        if isinstance(coastline, (str, Path)):
            coastline = load_coastline(coastline)
        clipped = clip_coastline(coastline, extent)
        if clipped.empty:
            log.info("No coastline within %s", extent)
        else:
            clipped.boundary.plot(ax=ax, color="black", linewidth=0.8)

    ax.set_xlim(west, east)
    ax.set_ylim(south, north)
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(title or str(label))

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=300, bbox_inches="tight")
        log.info("Saved climatology map to %s", output_path)
    if show_plot:
        plt.show()
    return fig, ax
