"""Keep the installed code-server binary current."""

import logging
from dataclasses import dataclass

from codelaunch.config import LauncherConfig
from codelaunch.freshness import FreshnessResult, check_artifact
from codelaunch.installer import install

logger = logging.getLogger(__name__)


@dataclass
class UpdateOutcome:
    installed: bool
    check: FreshnessResult | None = None
    bytes_written: int = 0


def ensure_current(config: LauncherConfig, force: bool = False) -> UpdateOutcome:
    """Check the binary against the listing and reinstall it when stale or missing.

    With force=True the listing is not consulted and the binary is always
    replaced.
    """
    check = None
    if not force:
        check = check_artifact(
            config.binary_path,
            config.listing_url,
            config.artifact_key,
            timeout=config.http_timeout,
        )
        if check.is_fresh:
            logger.info("Binary is healthy and up to date. Release the hounds.")
            return UpdateOutcome(installed=False, check=check)

    if check is None:
        logger.info("Forced update of %s.", config.binary_path)
    elif not check.exists:
        logger.info("Local %s binary is missing. Installing now.", config.bin_name)
    else:
        logger.info(
            "Local %s binary is unhealthy or out of date (%s <= %s). Updating now.",
            config.bin_name,
            check.local_modified.isoformat(),
            check.remote_modified.isoformat(),
        )

    written = install(
        config.binary_path,
        config.artifact_url,
        config.permissions,
        timeout=config.http_timeout,
    )
    return UpdateOutcome(installed=True, check=check, bytes_written=written)
