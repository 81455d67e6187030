"""
HTTP fetching for gotoolkit.

Two primitives sit on top of ``requests``:

- fetch_text(): small metadata bodies (version probes, checksum files)
- download_file(): streamed artifact downloads

Both follow redirects, fail on HTTP error statuses and always carry an
explicit timeout so a hung endpoint cannot hang the process. Neither retries;
fallback between sources is the caller's decision.
"""

import logging
from pathlib import Path
from typing import Union

import requests
from requests.exceptions import RequestException

from gotoolkit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192

Timeout = Union[float, tuple]


class FetchError(DownloadError):
    """Exception raised when a metadata fetch fails."""

    pass


def fetch_text(url: str, timeout: Timeout) -> str:
    """
    Fetch a URL and return its body as text.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds, or (connect, read) pair

    Returns:
        Response body

    Raises:
        FetchError: On connection errors, timeouts or HTTP error statuses
    """
    logger.debug(f"Fetching {url}")
    try:
        response = requests.get(url, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    return response.text


def download_file(url: str, destination: Path, timeout: Timeout) -> Path:
    """
    Stream a URL to a local file.

    A partially written file is removed when the download fails.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Request timeout in seconds, or (connect, read) pair

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If the download fails

    Example:
        >>> download_file(
        ...     "https://go.dev/dl/go1.22.5.linux-amd64.tar.gz",
        ...     Path("/tmp/go1.22.5.linux-amd64.tar.gz"),
        ...     timeout=(15, 60),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Downloading from {url}")
    downloaded = 0
    try:
        with requests.get(
            url, stream=True, timeout=timeout, allow_redirects=True
        ) as response:
            response.raise_for_status()
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
    except (RequestException, OSError) as e:
        destination.unlink(missing_ok=True)
        raise DownloadError(f"failed to download {destination.name}: {e}") from e

    logger.debug(f"Download complete: {destination} ({downloaded} bytes)")
    return destination
