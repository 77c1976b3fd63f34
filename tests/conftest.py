"""Shared test fixtures for the codelaunch test suite."""

import os
from datetime import datetime, timezone

import pytest
import requests

from codelaunch.config import default_config

BASE_URL = "https://bucket.test/"


# ---------------------------------------------------------------------------
# Listing documents
# ---------------------------------------------------------------------------

def _make_listing(entries, name="codesrv-ci.cdr.sh", namespace=True):
    """Build a ListBucketResult document from (key, last_modified) pairs."""
    contents = []
    for i, (key, modified) in enumerate(entries):
        contents.append(
            "<Contents>"
            f"<Key>{key}</Key>"
            f"<Generation>155572394083242{i}</Generation>"
            f"<LastModified>{modified}</LastModified>"
            f'<ETag>"d85a301acee0a0749660a802767c95c{i}"</ETag>'
            f"<Size>{94109479 + i}</Size>"
            "</Contents>"
        )
    xmlns = ' xmlns="http://doc.s3.amazonaws.com/2006-03-01"' if namespace else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f"<ListBucketResult{xmlns}>"
        f"<Name>{name}</Name><Prefix/><Marker/><IsTruncated>false</IsTruncated>"
        + "".join(contents)
        + "</ListBucketResult>"
    ).encode("utf-8")


def _set_mtime(path, when: datetime):
    ts = when.replace(tzinfo=timezone.utc).timestamp() if when.tzinfo is None else when.timestamp()
    os.utime(path, (ts, ts))


@pytest.fixture
def make_listing():
    """Builder for ListBucketResult documents from (key, last_modified) pairs."""
    return _make_listing


@pytest.fixture
def set_mtime():
    """Setter for a file's modification time (naive datetimes are UTC)."""
    return _set_mtime


# ---------------------------------------------------------------------------
# Fake HTTP
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, url, body=b"", status_code=200, chunk_size=4):
        self.url = url
        self.content = body
        self.status_code = status_code
        self._chunk_size = chunk_size

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for url: {self.url}", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), self._chunk_size):
            yield self.content[i:i + self._chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeHTTP:
    """Stands in for requests.get: serves canned bodies per URL and records calls."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, body=b"", status_code=200):
        self.routes[url] = (body, status_code)

    def fail(self, url, exc):
        self.routes[url] = exc

    def get(self, url, **kwargs):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(route, Exception):
            raise route
        body, status = route
        return FakeResponse(url, body, status)


@pytest.fixture
def fake_http(monkeypatch):
    http = FakeHTTP()
    monkeypatch.setattr(requests, "get", http.get)
    return http


# ---------------------------------------------------------------------------
# Fake processes
# ---------------------------------------------------------------------------

class FakePopen:
    next_pid = 4000
    returncode_for = {}

    def __init__(self, args, **kwargs):
        self.args = args
        FakePopen.next_pid += 1
        self.pid = FakePopen.next_pid
        self.returncode = None

    def wait(self, timeout=None):
        self.returncode = FakePopen.returncode_for.get(self.args[0], 0)
        return self.returncode


@pytest.fixture
def spawned(monkeypatch):
    """Replace subprocess.Popen; returns the list of spawned fakes."""
    procs = []
    FakePopen.returncode_for = {}

    def _popen(args, **kwargs):
        proc = FakePopen(args, **kwargs)
        procs.append(proc)
        return proc

    monkeypatch.setattr("subprocess.Popen", _popen)
    return procs


@pytest.fixture
def fake_popen(spawned):
    """The FakePopen class behind `spawned`, for setting exit codes or patching wait."""
    return FakePopen


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path):
    """Launcher config rooted in tmp_path (isolated per test)."""
    return default_config(home=tmp_path, base_url=BASE_URL, startup_timeout=0.1)


@pytest.fixture
def published():
    """Publish time of the artifact in the standard listing."""
    return datetime(2019, 4, 20, 1, 32, 20, tzinfo=timezone.utc)


@pytest.fixture
def standard_listing():
    return _make_listing([("latest-linux", "2019-04-20T01:32:20Z")])
