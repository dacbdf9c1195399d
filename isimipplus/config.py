"""Project paths: the directory holding climatology.yaml and the folders kept beside it."""

from pathlib import Path
from typing import Optional

CRITERIA_FILENAME = "climatology.yaml"


def find_project_root(start: Optional[Path] = None) -> Path:
    """Closest directory at or above ``start`` containing climatology.yaml, else the working directory."""
    start = Path(start or Path(__file__).parent).resolve()
    for candidate in (start, *start.parents):
        if (candidate / CRITERIA_FILENAME).is_file():
            return candidate
    return Path.cwd()


repo_dir = find_project_root()
criteria_fp = repo_dir / CRITERIA_FILENAME
plots_dir = repo_dir / "plots"
log_dir = repo_dir / "logs"
data_dir = Path("data")
