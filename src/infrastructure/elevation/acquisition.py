"""Dataset acquisition: download the DGM archive and extract it.

Both steps are idempotent across restarts: an existing archive is not
downloaded again and an existing release folder is not re-extracted.
Failures here are fatal for provider construction.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
import zipfile
from pathlib import Path

import requests

from domain.elevation.errors import AcquisitionError
from infrastructure.config import DATASET_RELEASES, ElevationSettings

logger = logging.getLogger(__name__)

USER_AGENT = "dgm-elevation"
CHUNK_SIZE = 64 * 1024


def _fetch(session: requests.Session, url: str, dest: Path, timeout_s: float) -> None:
    # Partial downloads never land at dest
    response = session.get(
        url, stream=True, timeout=timeout_s, headers={"User-Agent": USER_AGENT}
    )
    try:
        response.raise_for_status()
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as tmp_file:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        tmp_file.write(chunk)
            os.replace(tmp_name, dest)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
    finally:
        response.close()


def download_file(
    url: str,
    dest: Path | str,
    *,
    attempts: int = 3,
    backoff_s: float = 2.0,
    timeout_s: float = 10.0,
    session: requests.Session | None = None,
) -> Path:
    """Download ``url`` to ``dest`` unless ``dest`` already exists.

    Timeouts and connection errors are retried up to ``attempts`` times with
    a fixed ``backoff_s`` sleep in between. HTTP error statuses are not
    retried.

    Raises:
        AcquisitionError: On an HTTP error or once all attempts are exhausted
    """
    path = Path(dest)
    if path.exists():
        logger.info("File already exists: %s", path.name)
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    if session is not None:
        return _download_with_retry(session, url, path, attempts, backoff_s, timeout_s)
    with requests.Session() as http:
        return _download_with_retry(http, url, path, attempts, backoff_s, timeout_s)


def _download_with_retry(
    http: requests.Session,
    url: str,
    path: Path,
    attempts: int,
    backoff_s: float,
    timeout_s: float,
) -> Path:
    for attempt in range(1, attempts + 1):
        try:
            logger.info("Downloading %s (attempt %d/%d)", path.name, attempt, attempts)
            _fetch(http, url, path, timeout_s)
            logger.info("Finished downloading %s", path.name)
            return path
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if attempt >= attempts:
                raise AcquisitionError(
                    f"Download of {url} failed after {attempts} attempts: {e}"
                ) from e
            logger.warning(
                "Download attempt %d/%d failed (%s); retrying in %.1fs",
                attempt,
                attempts,
                e,
                backoff_s,
            )
            time.sleep(backoff_s)
        except requests.exceptions.RequestException as e:
            raise AcquisitionError(f"Download of {url} failed: {e}") from e
        except OSError as e:
            raise AcquisitionError(f"Cannot write {path.name}: {e.strerror}") from e

    # attempts < 1
    raise AcquisitionError(f"Download of {url} not attempted (attempts={attempts})")


def extract_archive(archive: Path | str, dest_dir: Path | str) -> Path:
    """Extract a zip archive into ``dest_dir``.

    Raises:
        AcquisitionError: If the archive is missing or not a valid zip file
    """
    archive_path = Path(archive)
    target = Path(dest_dir)
    target.mkdir(parents=True, exist_ok=True)

    logger.info("Extracting %s", archive_path.name)
    try:
        with zipfile.ZipFile(archive_path) as zf:
            zf.extractall(target)
    except FileNotFoundError as e:
        raise AcquisitionError(f"Archive not found: {archive_path.name}") from e
    except zipfile.BadZipFile as e:
        raise AcquisitionError(f"Corrupted archive {archive_path.name}: {e}") from e
    logger.info("Finished extracting %s", archive_path.name)
    return target


def prepare_dataset(
    settings: ElevationSettings, session: requests.Session | None = None
) -> Path:
    """Make sure the tiles for ``settings.resolution`` exist under the cache dir.

    Returns:
        The release folder holding the tiles
    """
    cache_dir = settings.cache_dir
    cache_dir.mkdir(parents=True, exist_ok=True)
    release_dir = cache_dir / DATASET_RELEASES[settings.resolution]

    if release_dir.is_dir():
        logger.info("Elevation data already prepared: %s", release_dir.name)
        return release_dir

    archive = download_file(
        settings.resolved_download_url(),
        settings.archive_path,
        attempts=settings.download_attempts,
        backoff_s=settings.download_backoff_s,
        timeout_s=settings.download_timeout_s,
        session=session,
    )
    extract_archive(archive, cache_dir)

    if not release_dir.is_dir():
        raise AcquisitionError(
            f"Archive {archive.name} did not contain release folder {release_dir.name}"
        )
    return release_dir
