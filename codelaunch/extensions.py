"""Share the desktop editor's extensions and settings with code-server.

Nothing is copied: each extension directory and settings file gets a symlink
in code-server's data directory, so updates made from the desktop editor show
up in the browser too. Anything already present in code-server's directories
is left alone.
"""

import logging
from pathlib import Path

from codelaunch.config import LauncherConfig
from codelaunch.errors import ExtensionLinkError

logger = logging.getLogger(__name__)

USER_FILES = ("settings.json", "keybindings.json")


def _link(target: Path, source: Path) -> bool:
    if target.exists() or target.is_symlink():
        return False
    try:
        target.symlink_to(source, target_is_directory=source.is_dir())
    except OSError as exc:
        raise ExtensionLinkError(f"link {target} -> {source}: {exc}") from exc
    return True


def _ensure_dir(path: Path, permissions: int):
    try:
        path.mkdir(mode=permissions, parents=True, exist_ok=True)
    except OSError as exc:
        raise ExtensionLinkError(f"mkdir {path}: {exc}") from exc


def link_extensions(config: LauncherConfig) -> list[str]:
    """Symlink every installed desktop extension into code-server's extension dir."""
    _ensure_dir(config.extension_dir, config.permissions)
    linked = []
    for source_dir in config.vscode_extension_dirs:
        if not source_dir.is_dir():
            continue
        for ext in sorted(source_dir.iterdir()):
            if not ext.is_dir():
                continue
            if _link(config.extension_dir / ext.name, ext):
                linked.append(ext.name)
    if linked:
        logger.info("Linked %d extension(s) into %s", len(linked), config.extension_dir)
    return linked


def link_user_settings(config: LauncherConfig) -> list[str]:
    """Symlink settings.json and keybindings.json if code-server has none of its own."""
    if not config.vscode_user_dir.is_dir():
        return []
    linked = []
    for name in USER_FILES:
        source = config.vscode_user_dir / name
        if not source.is_file():
            continue
        _ensure_dir(config.user_dir, config.permissions)
        if _link(config.user_dir / name, source):
            linked.append(name)
            logger.info("Linked %s from %s", name, config.vscode_user_dir)
    return linked
