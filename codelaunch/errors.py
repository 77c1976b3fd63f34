"""Launcher error taxonomy.

Every failure the launcher can hit is one of these. Components raise them;
only the entry point turns them into a process exit code.
"""

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_LISTING_FETCH = 3
EXIT_LISTING_PARSE = 4
EXIT_ARTIFACT_MISSING = 5
EXIT_INSTALL = 6
EXIT_PORT_TAKEN = 7
EXIT_EXTENSIONS = 8
EXIT_LAUNCH = 9


class LauncherError(Exception):
    exit_code = EXIT_UNEXPECTED


class ListingFetchError(LauncherError):
    """The bucket listing could not be downloaded."""

    exit_code = EXIT_LISTING_FETCH


class ListingParseError(LauncherError):
    """The bucket listing was not a usable ListBucketResult document."""

    exit_code = EXIT_LISTING_PARSE


class ArtifactNotFoundError(LauncherError):
    """The listing has no entry for the artifact we keep up to date."""

    exit_code = EXIT_ARTIFACT_MISSING

    def __init__(self, key: str, url: str):
        super().__init__(f"No {key} found in response from {url}")
        self.key = key
        self.url = url


class InstallError(LauncherError):
    """One step of the remove/download/write/chmod sequence failed."""

    exit_code = EXIT_INSTALL

    def __init__(self, step: str, path, cause: Exception):
        super().__init__(f"{step} {path}: {cause}")
        self.step = step
        self.path = path


class PortTakenError(LauncherError):
    exit_code = EXIT_PORT_TAKEN

    def __init__(self, port: int):
        super().__init__(f"Port {port} is taken")
        self.port = port


class ExtensionLinkError(LauncherError):
    exit_code = EXIT_EXTENSIONS


class LaunchError(LauncherError):
    exit_code = EXIT_LAUNCH
