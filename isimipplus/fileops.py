from pathlib import Path
import time
from typing import Optional


import yaml
from rich.console import Console


def read_yaml(file_path):
    with open(file_path, "r") as file:
        return yaml.safe_load(file) or {}


def read_criteria(file_path) -> tuple[dict, dict]:
    """Read the ``search_criteria`` and ``meta_criteria`` sections of a YAML config.

    Args:
        file_path: path to the YAML configuration file

    Returns (tuple[dict, dict]): search criteria and meta criteria, empty dicts if absent
    """
    criteria = read_yaml(file_path)
    return criteria.get("search_criteria") or {}, criteria.get("meta_criteria") or {}


def ensure_dir(path: str | Path) -> Path:
    """Create ``path`` (and parents) unless it already exists.

    Calling this on an existing directory is a no-op.
    """
    path = Path(path)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
    return path


def log_stage(console: Console, message: str, started: Optional[float] = None) -> float:
    """Print ``message`` with the wall-clock time, plus the time since ``started`` if given.

    Args:
        console (Console): the console to print to
        message (str): what is starting or ending
        started (float): ``time.perf_counter()`` value of an earlier call

    Returns (float): ``time.perf_counter()`` now, to pass back as ``started`` later
    """
    now = time.perf_counter()
    line = f":clock3: {message}: {time.strftime('%Y-%m-%d %H:%M:%S')}"
    if started is not None:
        line += f" (took {format_elapsed(now - started)})"
    console.print(line)
    return now


def format_elapsed(seconds: float) -> str:
    """Duration as ``1h 02m 05s``, ``2m 05s`` or ``5s``."""
    minutes, secs = divmod(int(round(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"
