"""Local TCP port checks."""

import socket
import time


def is_port_free(port: int, host: str = "") -> bool:
    """Try to listen on host:port (all interfaces by default) and release it at once."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(1)
    except OSError:
        return False
    finally:
        sock.close()
    return True


def wait_until_listening(host: str, port: int, timeout: float, interval: float = 0.2) -> bool:
    """Poll until something accepts connections on host:port, or timeout passes."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            with socket.create_connection((host, port), timeout=interval):
                return True
        except OSError:
            pass
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)
