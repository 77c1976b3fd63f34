"""Launcher configuration, built once at startup and passed to each component."""

import os
from dataclasses import dataclass, replace
from pathlib import Path

BASE_URL = "https://codesrv-ci.cdr.sh/"
ARTIFACT_KEY = "latest-linux"
BIN_NAME = "code-server-linux"
PORT = 1337
DEFAULT_PERMS = 0o770


@dataclass(frozen=True)
class LauncherConfig:
    """Fixed launcher settings.

    Directory fields left as None are derived from home: code-server keeps
    its data under ~/.local/share/code-server, the desktop editors keep
    extensions under ~/.vscode and ~/.vscode-oss and user settings under
    ~/.config/Code/User.
    """

    home: Path
    base_url: str = BASE_URL
    artifact_key: str = ARTIFACT_KEY
    bin_dir: Path | None = None
    bin_name: str = BIN_NAME
    port: int = PORT
    permissions: int = DEFAULT_PERMS
    bind_host: str = "0.0.0.0"
    server_flags: tuple[str, ...] = ("--allow-http", "--no-auth")
    browser_command: tuple[str, ...] = ("www-browser", "--url")
    browser_host: str = "penguin.linux.test"
    vscode_extension_dirs: tuple[Path, ...] | None = None
    extension_dir: Path | None = None
    vscode_user_dir: Path | None = None
    user_dir: Path | None = None
    http_timeout: float | None = None
    startup_timeout: float = 10.0

    def __post_init__(self):
        home = Path(self.home)
        data_dir = home / ".local" / "share" / "code-server"
        derived = {
            "home": home,
            "bin_dir": data_dir / "bin",
            "vscode_extension_dirs": (
                home / ".vscode" / "extensions",
                home / ".vscode-oss" / "extensions",
            ),
            "extension_dir": data_dir / "extensions",
            "vscode_user_dir": home / ".config" / "Code" / "User",
            "user_dir": data_dir / "User",
        }
        for name, value in derived.items():
            if name == "home" or getattr(self, name) is None:
                object.__setattr__(self, name, value)

    @property
    def binary_path(self) -> Path:
        return self.bin_dir / self.bin_name

    @property
    def listing_url(self) -> str:
        return self.base_url

    @property
    def artifact_url(self) -> str:
        return self.base_url + self.artifact_key

    @property
    def browser_url(self) -> str:
        return f"http://{self.browser_host}:{self.port}"

    def with_overrides(self, **changes) -> "LauncherConfig":
        """Return a copy with the given fields replaced (None values are ignored)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


def default_config(home: Path | str | None = None, **overrides) -> LauncherConfig:
    """Build the standard layout under the user's home directory ($HOME by default)."""
    if home is None:
        home = os.environ.get("HOME") or Path.home()
    return LauncherConfig(home=Path(home)).with_overrides(**overrides)
