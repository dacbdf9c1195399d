# general
import logging
from typing import List, Optional

import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# custom
from isimipplus import api
from isimipplus.models import FileReference, QueryFilter, SearchResult

log = logging.getLogger(__name__)


class SearchResults:
    """
    A class to hold search results from the ISIMIP catalog.
    It tabulates the matching datasets and exposes their file references.
    """

    def __init__(
        self,
        search_criteria: Optional[dict] = None,
        meta_criteria: Optional[dict] = None,
        api_instance: Optional[api.IsimipAPI] = None,
    ):
        # Validate and set search_criteria
        if search_criteria is None:
            self.search_criteria = {}
        elif isinstance(search_criteria, dict):
            self.search_criteria = search_criteria
        else:
            raise TypeError(
                f"search_criteria must be a dict, got {type(search_criteria).__name__}. "
                f"Did you mean to pass a dictionary like {{'simulation_round': 'ISIMIP3b'}} instead of {search_criteria}?"
            )

        # Validate and set meta_criteria
        if meta_criteria is None:
            self.meta_criteria = {}
        elif isinstance(meta_criteria, dict):
            self.meta_criteria = meta_criteria
        else:
            raise TypeError(
                f"meta_criteria must be a dict, got {type(meta_criteria).__name__}. "
                f"Did you mean to pass a dictionary like {{'data_dir': 'data'}} instead of {meta_criteria}?"
            )

        self.query_filter = QueryFilter.from_dict(self.search_criteria)
        self.search_result = SearchResult()
        self.results_df = None  # one row per file, specifiers flattened into columns
        self._api = api_instance

    @property
    def api(self) -> api.IsimipAPI:
        if self._api is None:
            self._api = api.IsimipAPI(data_dir=self.meta_criteria.get("data_dir"))
        return self._api

    def do_search(self) -> SearchResult:
        """Query the catalog and tabulate the matching datasets."""
        self.search_result = self.api.search(self.query_filter)
        self.results_df = self.to_dataframe()
        if self.results_df.empty:
            log.info("No results found for given criteria.")
        return self.search_result

    def to_dataframe(self) -> pd.DataFrame:
        """Flatten the search result into one row per file."""
        rows = []
        for dataset in self.search_result.results:
            for file in dataset.files:
                rows.append(
                    {
                        "dataset": dataset.name,
                        **dataset.specifiers,
                        "path": file.path,
                        "file_url": file.file_url,
                        "filename": file.filename,
                    }
                )
        return pd.DataFrame(rows)

    def file_references(self) -> List[FileReference]:
        return self.search_result.file_references()

    def search_message(self, search_state: str) -> None:
        """Display summary of dataset search."""
        console = Console()
        # create search table
        search_table = Table(
            title="Search Criteria",
            show_header=True,
            header_style="bold magenta",
        )
        search_table.add_column("Key", style="dim", width=20)
        search_table.add_column("Value", style="bold")
        for k, v in self.query_filter.as_params().items():
            search_table.add_row(str(k), str(v))
        if search_state == "pre":
            console.print(
                Panel(search_table, title="[cyan]Searching", border_style="cyan")
            )
        if search_state == "post":
            n_datasets = self.search_result.count
            n_files = len(self.file_references())
            dataset_str = "datasets" if n_datasets != 1 else "dataset"
            file_str = "files" if n_files != 1 else "file"
            msg = f"[green]Search completed.[/green] [bold]{n_datasets}[/bold] {dataset_str} ({n_files} {file_str}) found matching criteria."  # noqa
            console.print(
                Panel(msg, title="[green]Search Results", border_style="green")
            )

    def run(self) -> List[FileReference]:
        """Search, report and return the file references of every match."""
        self.search_message("pre")
        self.do_search()
        self.search_message("post")
        return self.file_references()
