"""Download the server binary and put it in place."""

import logging
import os
from pathlib import Path

import requests

from codelaunch.errors import InstallError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def remove_existing(path: Path) -> bool:
    """Remove path if present. Returns True when something was removed."""
    try:
        path.unlink()
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as exc:
        raise InstallError("remove", path, exc) from exc
    return True


def install(
    local_path: Path,
    artifact_url: str,
    permissions: int,
    timeout: float | None = None,
) -> int:
    """Replace local_path with the body of artifact_url and make it executable.

    Steps run in order: remove the old file, create the parent directories,
    stream the download into a new file, chmod. The first failure raises
    InstallError naming the step; a partially written file is left as is.
    Returns the number of bytes written.
    """
    local_path = Path(local_path)
    if remove_existing(local_path):
        logger.info("Removed old binary %s", local_path)

    try:
        local_path.parent.mkdir(mode=permissions, parents=True, exist_ok=True)
    except OSError as exc:
        raise InstallError("mkdir", local_path.parent, exc) from exc

    logger.info("Downloading %s", artifact_url)
    written = 0
    try:
        with requests.get(artifact_url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            try:
                fout = open(local_path, "wb")
            except OSError as exc:
                raise InstallError("create", local_path, exc) from exc
            with fout:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fout.write(chunk)
                        written += len(chunk)
    except requests.RequestException as exc:
        raise InstallError("download", artifact_url, exc) from exc
    except OSError as exc:
        raise InstallError("copy", local_path, exc) from exc

    try:
        os.chmod(local_path, permissions)
    except OSError as exc:
        raise InstallError("chmod", local_path, exc) from exc

    logger.info("Wrote %d bytes to %s", written, local_path)
    return written
