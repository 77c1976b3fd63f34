"""Start code-server and a browser pointed at it."""

import logging
import shutil
import subprocess
import webbrowser
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from codelaunch.config import LauncherConfig
from codelaunch.errors import LaunchError
from codelaunch.ports import wait_until_listening

logger = logging.getLogger(__name__)


@dataclass
class Launch:
    server: subprocess.Popen
    browser: subprocess.Popen | None = None
    futures: list[Future] = field(default_factory=list)


def server_command(config: LauncherConfig) -> list[str]:
    return [
        str(config.binary_path),
        "--host", config.bind_host,
        *config.server_flags,
        f"--port={config.port}",
    ]


def browser_command(config: LauncherConfig) -> list[str]:
    return [*config.browser_command, config.browser_url]


def spawn(args: list[str]) -> subprocess.Popen:
    """Start args in the background and log its pid."""
    try:
        proc = subprocess.Popen(args)
    except OSError as exc:
        raise LaunchError(f"Exec {args[0]}: {exc}") from exc
    logger.info("Pid: %d (%s)", proc.pid, args[0])
    return proc


def describe_exit(returncode: int) -> str:
    if returncode == 0:
        return "finished cleanly"
    if returncode < 0:
        return f"finished with error: killed by signal {-returncode}"
    return f"finished with error: exit status {returncode}"


def _name(proc: subprocess.Popen) -> str:
    return proc.args[0] if isinstance(proc.args, (list, tuple)) else str(proc.args)


def wait_and_log(proc: subprocess.Popen) -> int | None:
    """Block until proc exits and log its status. Wait errors are logged, not raised."""
    try:
        returncode = proc.wait()
    except OSError as exc:
        logger.error("Command %s (pid %d) could not be waited on: %s", _name(proc), proc.pid, exc)
        return None
    level = logging.INFO if returncode == 0 else logging.WARNING
    logger.log(level, "Command %s (pid %d) %s", _name(proc), proc.pid, describe_exit(returncode))
    return returncode


def watch(procs: list[subprocess.Popen]) -> list[Future]:
    """Wait for each process on a background thread and log how it exited.

    Returns immediately. The worker threads are not daemons, so the
    interpreter stays up until every watched process has exited and been
    logged.
    """
    executor = ThreadPoolExecutor(max_workers=len(procs), thread_name_prefix="wait")
    futures = [executor.submit(wait_and_log, proc) for proc in procs]
    executor.shutdown(wait=False)
    return futures


def open_browser(config: LauncherConfig) -> subprocess.Popen | None:
    """Run the configured browser command, or fall back to the webbrowser module."""
    args = browser_command(config)
    if shutil.which(args[0]) is None:
        logger.warning("%s not found on PATH, opening %s with the default browser", args[0], config.browser_url)
        webbrowser.open(config.browser_url)
        return None
    return spawn(args)


def launch(config: LauncherConfig, with_browser: bool = True) -> Launch:
    """Spawn the server (and the browser), then return without waiting on either."""
    server = spawn(server_command(config))
    result = Launch(server=server, futures=watch([server]))

    if with_browser:
        if not wait_until_listening("127.0.0.1", config.port, config.startup_timeout):
            logger.warning(
                "Server not accepting connections on port %d after %.0fs, opening browser anyway",
                config.port, config.startup_timeout,
            )
        result.browser = open_browser(config)
        if result.browser is not None:
            result.futures.extend(watch([result.browser]))
    return result
