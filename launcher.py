"""Entry point — updates the code-server binary, starts it and opens a browser."""

import argparse
import logging
import sys

from codelaunch.config import default_config
from codelaunch.errors import EXIT_OK, ArtifactNotFoundError, LauncherError, PortTakenError
from codelaunch.extensions import link_extensions, link_user_settings
from codelaunch.launch import launch
from codelaunch.ports import is_port_free
from codelaunch.updater import ensure_current

logger = logging.getLogger("codelaunch")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep code-server current and launch it")
    parser.add_argument("--port", type=int, help="Port to run code-server on (default 1337)")
    parser.add_argument("--force-update", action="store_true", help="Reinstall the binary without checking the listing")
    parser.add_argument("--check-only", action="store_true", help="Update the binary if needed, then exit")
    parser.add_argument("--no-browser", action="store_true", help="Start the server without opening a browser")
    parser.add_argument("--no-extensions", action="store_true", help="Skip linking desktop extensions and settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def run(config, force_update=False, check_only=False, with_browser=True, with_extensions=True):
    """Update, check the port, link extensions, launch. Raises LauncherError on any fatal step."""
    ensure_current(config, force=force_update)
    if check_only:
        return None

    if not is_port_free(config.port):
        raise PortTakenError(config.port)
    logger.info("Port %d is clear. Ready to launch.", config.port)

    if with_extensions:
        link_extensions(config)
        link_user_settings(config)

    print(f"Starting code-server at {config.browser_url}")
    print("Close this window to stop the server.\n")
    return launch(config, with_browser=with_browser)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    config = default_config(port=args.port)
    try:
        run(
            config,
            force_update=args.force_update,
            check_only=args.check_only,
            with_browser=not args.no_browser,
            with_extensions=not args.no_extensions,
        )
    except ArtifactNotFoundError as exc:
        logger.critical("%s. Exiting now.", exc)
        return exc.exit_code
    except LauncherError as exc:
        logger.error("%s. Exiting now.", exc)
        return exc.exit_code
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
