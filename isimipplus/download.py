# general
import hashlib
import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

# third-party
import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from isimipplus import config
from isimipplus.fileops import ensure_dir
from isimipplus.models import FileReference

log = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".zip", ".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tar.xz")


class ChecksumError(Exception):
    """Raised when a downloaded file does not match its published checksum."""


def is_archive(path: str | Path) -> bool:
    return str(path).lower().endswith(ARCHIVE_SUFFIXES)


def file_checksum(path: Path, checksum_type: str = "sha512", chunk_size: int = 65536) -> str:
    """Hex digest of a file, read in chunks."""
    digest = hashlib.new(checksum_type)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def archive_stem(archive_path: Path) -> str:
    name = archive_path.name
    for suffix in ARCHIVE_SUFFIXES:
        if name.lower().endswith(suffix):
            return name[: -len(suffix)]
    return archive_path.stem


def extract_archive(archive_path: Path) -> Path:
    """Unpack an archive into a sibling directory named after it and return that directory."""
    target_dir = archive_path.parent / archive_stem(archive_path)
    shutil.unpack_archive(str(archive_path), extract_dir=str(target_dir))
    log.info("Extracted %s into %s", archive_path.name, target_dir)
    return target_dir


def download_file(
    url: str,
    path: str | Path = config.data_dir,
    validate: bool = True,
    extract: bool = True,
    checksum: Optional[str] = None,
    checksum_type: Optional[str] = "sha512",
    session: Optional[requests.Session] = None,
    timeout: tuple[int, int] = (60, 300),
    progress: Optional[Progress] = None,
) -> Path:
    """Download a file into a local directory, optionally validating and extracting it.

    The directory is created when absent. Data is streamed into ``<name>.part``
    and renamed once complete. HTTP and disk errors propagate; a failed
    download is not retried and its ``.part`` file is left in place.

    Args:
        url (str): remote location of the file
        path (str | Path): destination directory
        validate (bool): compare the file hash against ``checksum``
        extract (bool): unpack the file if it is an archive
        checksum (str): expected hex digest, if published
        checksum_type (str): hashlib algorithm name of ``checksum``
        session (requests.Session): session to issue the request with
        timeout (tuple[int, int]): connect and read timeouts in seconds
        progress (Progress): rich progress display to report bytes to

    Returns (Path): the downloaded file, or the extraction directory for archives
    """
    if not url or not url.startswith("http"):
        raise ValueError(f"Invalid download URL: {url!r}")

    output_dir = ensure_dir(path)
    file_path = output_dir / urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    temp_path = file_path.with_suffix(file_path.suffix + ".part")

    getter = session.get if session is not None else requests.get
    response = getter(url, stream=True, timeout=timeout)
    response.raise_for_status()
    total = int(response.headers.get("content-length", 0) or 0)

    task_id = None
    if progress is not None:
        task_id = progress.add_task(file_path.name, total=total or None)

    with open(temp_path, "wb") as f:
        for chunk in response.iter_content(chunk_size=65536):
            if chunk:
                f.write(chunk)
                if task_id is not None:
                    progress.update(task_id, advance=len(chunk))
    temp_path.replace(file_path)
    log.info("Downloaded %s (%s bytes)", file_path.name, file_path.stat().st_size)

    if validate:
        if checksum:
            actual = file_checksum(file_path, checksum_type or "sha512")
            if actual != checksum:
                raise ChecksumError(
                    f"{checksum_type} mismatch for {file_path.name}: expected {checksum}, got {actual}"
                )
        else:
            log.warning("No checksum published for %s, skipping validation", file_path.name)

    if extract and is_archive(file_path):
        return extract_archive(file_path)
    return file_path


class Retriever:
    """Download a list of file references one after the other."""

    def __init__(
        self,
        files: Sequence[FileReference],
        output_dir: str | Path = config.data_dir,
        validate: bool = True,
        extract: bool = True,
        session: Optional[requests.Session] = None,
        verbose: bool = True,
    ):
        self.files = list(files)
        self.output_dir = Path(output_dir)
        self.validate = validate
        self.extract = extract
        self.session = session
        self.verbose = verbose

    def _progress(self) -> Progress:
        return Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            disable=not self.verbose,
        )

    def run(self) -> List[Path]:
        if not self.files:
            log.info("Nothing to download.")
            return []

        local_paths = []
        with self._progress() as progress:
            for file in self.files:
                local_paths.append(
                    download_file(
                        file.file_url,
                        path=self.output_dir,
                        validate=self.validate,
                        extract=self.extract,
                        checksum=file.checksum,
                        checksum_type=file.checksum_type or "sha512",
                        session=self.session,
                        progress=progress,
                    )
                )
        return local_paths
