"""Decide whether the installed binary is current with the bucket listing."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from codelaunch.errors import ArtifactNotFoundError, ListingParseError
from codelaunch.listing import fetch_listing

logger = logging.getLogger(__name__)


@dataclass
class FreshnessResult:
    exists: bool
    is_fresh: bool
    local_modified: datetime | None = None
    remote_modified: datetime | None = None


def local_modified(path: Path) -> datetime:
    """Return the file's modification time as an aware UTC datetime."""
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def check_artifact(
    local_path: Path,
    listing_url: str,
    expected_key: str,
    timeout: float | None = None,
) -> FreshnessResult:
    """Compare the local binary's mtime against the listing entry for expected_key.

    A missing local file short-circuits without touching the network. The
    local copy only counts as fresh when it is strictly newer than the
    published artifact; an identical timestamp means stale.

    Raises ArtifactNotFoundError when no listing entry carries expected_key,
    whatever the state of the local file.
    """
    local_path = Path(local_path)
    if not local_path.exists():
        logger.debug("%s does not exist", local_path)
        return FreshnessResult(exists=False, is_fresh=False)

    mtime = local_modified(local_path)
    listing = fetch_listing(listing_url, timeout=timeout)

    entry = listing.find(expected_key)
    if entry is None:
        raise ArtifactNotFoundError(expected_key, listing_url)
    if entry.last_modified is None:
        raise ListingParseError(f"Entry {expected_key} has no LastModified")

    return FreshnessResult(
        exists=True,
        is_fresh=mtime > entry.last_modified,
        local_modified=mtime,
        remote_modified=entry.last_modified,
    )
