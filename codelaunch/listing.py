"""Fetch and parse the S3-style bucket listing that publishes the server binary.

The CI bucket answers a GET on its root with a ListBucketResult document:

    <ListBucketResult xmlns="http://doc.s3.amazonaws.com/2006-03-01">
        <Name>codesrv-ci.cdr.sh</Name>
        <Contents>
            <Key>latest-linux</Key>
            <LastModified>2019-04-20T01:32:20.832Z</LastModified>
            <ETag>"d85a301acee0a0749660a802767c95c3"</ETag>
            <Size>94109479</Size>
        </Contents>
    </ListBucketResult>
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from codelaunch.errors import ListingFetchError, ListingParseError

logger = logging.getLogger(__name__)

ROOT_TAG = "ListBucketResult"

_FRACTION_RE = re.compile(r"\.(\d+)")


@dataclass
class Entry:
    key: str
    last_modified: datetime | None = None
    size: int = 0
    etag: str = ""


@dataclass
class RemoteListing:
    name: str = ""
    entries: list[Entry] = field(default_factory=list)

    def find(self, key: str) -> Entry | None:
        """Return the first entry (document order) whose key matches."""
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware UTC datetime."""
    value = text.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat only takes 3 or 6 fractional digits before 3.11
    value = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ListingParseError(f"Bad timestamp {text!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(elem: ET.Element, name: str) -> str | None:
    for child in elem:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return None


def _parse_entry(elem: ET.Element) -> Entry:
    key = _child_text(elem, "Key")
    if key is None:
        raise ListingParseError("Contents element without a Key")

    modified = _child_text(elem, "LastModified")
    size = _child_text(elem, "Size")
    try:
        size = int(size) if size else 0
    except ValueError as exc:
        raise ListingParseError(f"Bad size {size!r} for {key}") from exc

    return Entry(
        key=key,
        last_modified=parse_timestamp(modified) if modified else None,
        size=size,
        etag=(_child_text(elem, "ETag") or "").strip('"'),
    )


def parse_listing(body: bytes | str) -> RemoteListing:
    """Parse a ListBucketResult document, namespaced or not."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise ListingParseError(f"Listing is not valid XML: {exc}") from exc
    if _local(root.tag) != ROOT_TAG:
        raise ListingParseError(f"Expected <{ROOT_TAG}>, got <{_local(root.tag)}>")

    entries = [_parse_entry(child) for child in root if _local(child.tag) == "Contents"]
    return RemoteListing(name=_child_text(root, "Name") or "", entries=entries)


def _fetch_url(url: str, timeout: float | None = None) -> requests.Response:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp


def fetch_listing(url: str, timeout: float | None = None) -> RemoteListing:
    """GET the listing and parse it. Never cached: every call hits the bucket."""
    logger.debug("Fetching listing %s", url)
    try:
        resp = _fetch_url(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ListingFetchError(f"xml download {url}: {exc}") from exc
    listing = parse_listing(resp.content)
    logger.debug("Listing %s has %d entries", listing.name or url, len(listing.entries))
    return listing
