#!/usr/bin/env python3
"""
Script to compute and map an ISIMIP climatology based on climatology.yaml.

This script:
1. Reads search and meta criteria from climatology.yaml
2. Searches the ISIMIP repository (optionally requesting a regional cutout)
3. Downloads the matching file(s) into the data directory
4. Computes the per-cell climatology and saves a contour map
"""

import argparse
import logging
from pathlib import Path
import sys
import time

from rich.console import Console
from rich.logging import RichHandler

from isimipplus import config, fileops
from isimipplus.pipeline import run_pipeline


def main():
    parser = argparse.ArgumentParser(
        description="Compute an ISIMIP climatology map from climatology.yaml"
    )
    parser.add_argument(
        "--config-path",
        dest="config_path",
        type=str,
        default=str(config.criteria_fp),
        help="Path to climatology.yaml configuration file (default: climatology.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Download directory (overrides meta_criteria.data_dir)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the climatology map (default: plots)",
    )
    parser.add_argument(
        "--years",
        type=int,
        nargs=2,
        metavar=("START", "END"),
        default=None,
        help="Inclusive year window (overrides meta_criteria.years)",
    )
    parser.add_argument(
        "--show-plot",
        action="store_true",
        default=False,
        help="Display the map interactively",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log debug messages",
    )
    args = parser.parse_args()

    log_file = fileops.ensure_dir(config.log_dir) / f"climatology_{time.strftime('%Y-%m-%d_%H-%M-%S')}.log"
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True), file_handler],
    )
    console = Console()
    started = fileops.log_stage(console, "Starting climatology run")

    config_path = Path(args.config_path)
    if not config_path.exists():
        console.print(f"[red]Error: Configuration file not found: {config_path}[/red]")
        sys.exit(1)

    console.print(f"Reading configuration from {config_path}")
    search_criteria, meta_criteria = fileops.read_criteria(config_path)
    if not search_criteria:
        console.print("[red]Error: No search_criteria found in configuration file[/red]")
        sys.exit(1)

    if args.data_dir:
        meta_criteria["data_dir"] = args.data_dir
    if args.output_dir:
        meta_criteria["plots_dir"] = args.output_dir
    if args.years:
        meta_criteria["years"] = args.years
    meta_criteria["show_plot"] = args.show_plot

    result = run_pipeline(search_criteria, meta_criteria)

    if result.climatology is not None:
        n_missing = int(result.climatology.isna().sum())
        console.print(
            f"[green]Climatology {result.years[0]}-{result.years[1]} complete:[/green] "
            f"{len(result.climatology)} cells, {n_missing} missing"
        )

    fileops.log_stage(console, "Ending climatology run", started)


if __name__ == "__main__":
    main()
