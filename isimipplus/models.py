"""
Records exchanged with the ISIMIP repository.

The catalog service answers with plain JSON; these dataclasses give the few
fields the pipeline relies on a fixed, named shape.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

# short names used in the tutorial notebooks -> catalog facet names
FILTER_ALIASES = {
    "forcing": "climate_forcing",
    "scenario": "climate_scenario",
    "variable": "climate_variable",
}


@dataclass
class QueryFilter:
    """Facets sent to the catalog's dataset search."""
    simulation_round: Optional[str] = None  # e.g. "ISIMIP3b"
    product: Optional[str] = None  # e.g. "InputData", "OutputData"
    climate_forcing: Optional[str] = None  # e.g. "gfdl-esm4"
    climate_scenario: Optional[str] = None  # e.g. "ssp585"
    model: Optional[str] = None
    climate_variable: Optional[str] = None  # e.g. "tas"
    extra: Dict[str, Any] = field(default_factory=dict)  # resolution, time_step, ...

    @classmethod
    def from_dict(cls, criteria: Dict[str, Any]) -> "QueryFilter":
        if not isinstance(criteria, dict):
            raise TypeError(
                f"query criteria must be a dict, got {type(criteria).__name__}"
            )
        known = {f.name for f in fields(cls) if f.name != "extra"}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in criteria.items():
            key = FILTER_ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)

    def as_params(self) -> Dict[str, Any]:
        """Non-empty facets as keyword arguments for the catalog client."""
        params = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) not in (None, "")
        }
        params.update({k: v for k, v in self.extra.items() if v not in (None, "")})
        return params


@dataclass(frozen=True)
class FileReference:
    """A remote file: where to fetch it and its path inside the repository."""
    file_url: str
    path: str = ""
    checksum: Optional[str] = None
    checksum_type: Optional[str] = None

    @property
    def filename(self) -> str:
        return urlparse(self.file_url).path.rsplit("/", 1)[-1]

    @classmethod
    def from_dict(cls, source: Dict[str, Any]) -> "FileReference":
        return cls(
            file_url=source["file_url"],
            path=source.get("path", ""),
            checksum=source.get("checksum"),
            checksum_type=source.get("checksum_type"),
        )


@dataclass
class DatasetDescriptor:
    specifiers: Dict[str, Any] = field(default_factory=dict)
    files: List[FileReference] = field(default_factory=list)
    name: str = ""
    path: str = ""

    @classmethod
    def from_dict(cls, source: Dict[str, Any]) -> "DatasetDescriptor":
        return cls(
            specifiers=dict(source.get("specifiers") or {}),
            files=[FileReference.from_dict(f) for f in source.get("files") or []],
            name=source.get("name", ""),
            path=source.get("path", ""),
        )


@dataclass
class SearchResult:
    """Catalog answer: a hit count and the matching dataset descriptors."""
    count: int = 0
    results: List[DatasetDescriptor] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: Optional[Dict[str, Any]]) -> "SearchResult":
        if not response:
            return cls()
        results = [DatasetDescriptor.from_dict(r) for r in response.get("results") or []]
        return cls(count=int(response.get("count", len(results))), results=results)

    def file_references(self) -> List[FileReference]:
        return [f for dataset in self.results for f in dataset.files]

    def paths(self) -> List[str]:
        return [f.path for f in self.file_references()]


@dataclass(frozen=True)
class BoundingBox:
    """Spatial extent in degrees, signed longitude (-180..180)."""
    south: float
    north: float
    west: float
    east: float

    def __post_init__(self):
        if not -90 <= self.south <= 90 or not -90 <= self.north <= 90:
            raise ValueError(
                f"latitudes must lie in [-90, 90], got south={self.south}, north={self.north}"
            )
        if not -180 <= self.west <= 180 or not -180 <= self.east <= 180:
            raise ValueError(
                f"longitudes must lie in [-180, 180], got west={self.west}, east={self.east}"
            )
        if self.south > self.north:
            raise ValueError(f"south ({self.south}) is north of north ({self.north})")
        if self.west > self.east:
            raise ValueError(f"west ({self.west}) is east of east ({self.east})")

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "BoundingBox":
        """Build from ``[south, north, west, east]``."""
        if len(values) != 4:
            raise ValueError(
                f"bounding box needs 4 values [south, north, west, east], got {list(values)}"
            )
        south, north, west, east = (float(v) for v in values)
        return cls(south=south, north=north, west=west, east=east)

    def as_list(self) -> List[float]:
        return [self.south, self.north, self.west, self.east]
