"""Template downloader with progress tracking.

This module fetches remote template archives over HTTP.
"""

from typing import Optional
from urllib.parse import urlparse

import requests
from tqdm import tqdm


class DownloadError(Exception):
    """Raised when download fails."""

    pass


class PackageDownloader:
    """Downloads archives into memory with progress tracking."""

    def __init__(self, chunk_size: int = 8192, timeout: Optional[float] = 30):
        """Initialize downloader.

        Args:
            chunk_size: Size of chunks for downloading
            timeout: Connect/read timeout passed to requests
        """
        self.chunk_size = chunk_size
        self.timeout = timeout

    def fetch(self, url: str, show_progress: bool = True) -> bytes:
        """Download a URL and return its body.

        Args:
            url: URL to download from
            show_progress: Whether to show progress bar

        Returns:
            Response body

        Raises:
            DownloadError: If the request fails or returns an error status
        """
        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            total_size = int(response.headers.get("content-length", 0))

            progress_bar = None
            if show_progress and total_size > 0:
                filename = urlparse(url).path.rsplit("/", 1)[-1]
                progress_bar = tqdm(
                    total=total_size,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=f"Downloading {filename}",
                )

            chunks = []
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    chunks.append(chunk)
                    if progress_bar:
                        progress_bar.update(len(chunk))

            if progress_bar:
                progress_bar.close()

            return b"".join(chunks)

        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}")
