import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from isimip_client.client import ISIMIPClient
from rich import print as rich_print

from isimipplus import config
from isimipplus.models import BoundingBox, FileReference, QueryFilter, SearchResult

log = logging.getLogger(__name__)


class IsimipAPI:
    """
    Python API for the ISIMIP repository: dataset search and server-side cutouts.

    Errors raised by the underlying client (HTTP, connection) are passed on
    to the caller untouched.
    """

    def __init__(
        self,
        client: Optional[ISIMIPClient] = None,
        data_dir: Optional[str | Path] = None,
    ):
        self.client = client if client is not None else ISIMIPClient()
        self.data_dir = Path(data_dir) if data_dir else config.data_dir

    def search(self, criteria: QueryFilter | Dict[str, Any]) -> SearchResult:
        """
        Search the catalog for datasets matching the criteria.

        Args:
            criteria: a QueryFilter, or a dict of facets
                (e.g. simulation_round, product, climate_variable).

        Returns:
            A SearchResult; count is 0 and results empty when nothing matches.
        """
        if isinstance(criteria, dict):
            criteria = QueryFilter.from_dict(criteria)
        params = criteria.as_params()
        log.debug("Searching ISIMIP datasets with %s", params)
        response = self.client.datasets(**params)
        result = SearchResult.from_response(response)
        log.info("Catalog returned %d dataset(s)", result.count)
        return result

    def cutout(
        self,
        paths: Sequence[str],
        bbox: BoundingBox | Sequence[float],
        poll: Optional[int] = 10,
    ) -> FileReference:
        """
        Ask the repository to crop files to a bounding box.

        The crop happens on the server; nothing is cut locally.

        Args:
            paths: repository paths of the files to crop
            bbox: BoundingBox or [south, north, west, east] in degrees
            poll: seconds between job status checks while the server works

        Returns:
            FileReference to the cropped archive.
        """
        paths = list(paths)
        if not paths:
            raise ValueError("cutout needs at least one file path")
        if not isinstance(bbox, BoundingBox):
            bbox = BoundingBox.from_sequence(bbox)

        file_str = "file" if len(paths) == 1 else "files"
        rich_print(
            f"[blue]Requesting cutout of {len(paths)} {file_str} to {bbox.as_list()}...[/blue]"
        )
        response = self.client.cutout(paths, bbox.as_list(), poll=poll)
        return FileReference(file_url=response["file_url"])
