"""
Downloader

Small component that saves the body of a resolved (non-HTML) destination to
a temporary file and then discovers what the file really is by looking at its
first bytes ("magic numbers"), instead of trusting the `Content-Type` header.

- "stream": the body is copied in chunks straight from the network to disk,
  it is never held in memory as a whole.
- "hash": a SHA-256 of the content is computed while writing, useful to check
  that the download is complete and to deduplicate downstream.
- "sniffing": after the download the file is re-opened, the header window is
  matched against the `filetype` signature table and the file is renamed so
  its extension matches the detected type.

Errors never raise: they are recorded on the returned `DownloadedContent`.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from typing import Optional

import filetype
import requests

from content_harvester.core.models import DownloadedContent, FileType
from content_harvester.core.scraping.fetcher import Fetcher

TEMP_PREFIX = "ContentHarvester-"

# filetype only needs the file header: the first 261 bytes
HEADER_WINDOW = 261


class Downloader:
    """Download one response body and sniff its file type.

    Accepts an optional `Fetcher` so tests can inject a fake one that returns
    controlled responses.
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        dest_dir: Optional[str] = None,
        prefix: str = TEMP_PREFIX,
        chunk_size: int = 8192,
    ):
        self.fetcher = fetcher or Fetcher()
        self.dest_dir = dest_dir
        self.prefix = prefix
        self.chunk_size = chunk_size

    def download(self, url: str) -> DownloadedContent:
        """GET `url` (streamed) and save its body, see `save_response`."""
        resp = self.fetcher.stream_get(url)
        return self.save_response(url, resp)

    def save_response(self, url: str, resp) -> DownloadedContent:
        """Copy `resp` body into a temp file, then sniff and tag its type."""
        result = DownloadedContent(url=url)
        try:
            fd, path = tempfile.mkstemp(prefix=self.prefix, dir=self.dest_dir)
        except OSError as exc:
            result.download_error = str(exc)
            _close(resp)
            return result

        result.dest_path = path
        hasher = hashlib.sha256()
        total = 0
        try:
            with os.fdopen(fd, "wb") as fh:
                for chunk in resp.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    fh.write(chunk)
                    hasher.update(chunk)
                    total += len(chunk)
        except (OSError, requests.RequestException) as exc:
            # o arquivo parcial continua em dest_path; delete() remove
            result.download_error = str(exc)
            return result
        finally:
            _close(resp)

        result.sha256 = hasher.hexdigest()
        result.size = total
        self.sniff(result)
        return result

    def sniff(self, downloaded: DownloadedContent) -> DownloadedContent:
        """Match the header window of the stored bytes against known signatures.

        On a match the file is renamed with the detected extension; otherwise
        `file_type_error` is set and the file keeps its original name.
        """
        path = downloaded.dest_path
        if not path:
            downloaded.file_type_error = "nothing was downloaded"
            return downloaded

        try:
            with open(path, "rb") as fh:
                head = fh.read(HEADER_WINDOW)
        except OSError as exc:
            downloaded.file_type_error = str(exc)
            return downloaded

        if not head:
            downloaded.file_type_error = "empty file"
            return downloaded

        kind = filetype.guess(head)
        if kind is None:
            downloaded.file_type_error = "unknown file type"
            return downloaded

        downloaded.file_type = FileType(kind.extension, kind.mime)
        root, _ = os.path.splitext(path)
        new_path = f"{root}.{kind.extension}"
        try:
            os.replace(path, new_path)
        except OSError as exc:
            downloaded.file_type_error = str(exc)
            return downloaded
        downloaded.dest_path = new_path
        return downloaded


def _close(resp) -> None:
    close = getattr(resp, "close", None)
    if close is not None:
        close()
