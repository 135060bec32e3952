"""
Plain HTTP downloads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import requests

from winebuild.errors import FetchError

if TYPE_CHECKING:
    from rich.progress import Progress

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class Fetcher:
    """Download URLs to local files, overwriting whatever is there."""

    def __init__(self, session: requests.Session | None = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def download(
        self,
        url: str,
        destination: Path | str,
        progress: Progress | None = None,
    ) -> Path:
        """
        Stream a URL to a file.

        Args:
            url: Source URL (redirects are followed)
            destination: File to write; parent directories are created
            progress: Optional rich Progress to report bytes received

        Returns:
            The destination path

        Raises:
            FetchError: On transport failure or a non-2xx response
        """
        destination = Path(destination)
        logger.debug(f"Downloading {url} to {destination}")

        task = None
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self.session.get(url, stream=True, allow_redirects=True, timeout=self.timeout) as response:
                if not response.ok:
                    raise FetchError(
                        f"Could not download from {url}: HTTP {response.status_code}"
                    )

                if progress:
                    task = progress.add_task(
                        f"Downloading {destination.name}", total=_expected_size(response)
                    )

                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        if progress and task is not None:
                            progress.advance(task, len(chunk))
        except requests.RequestException as e:
            _remove_partial(destination)
            raise FetchError(f"Could not download from {url}: {e}") from e
        except FetchError:
            _remove_partial(destination)
            raise
        except OSError as e:
            _remove_partial(destination)
            raise FetchError(f"Could not write {destination}: {e}") from e
        finally:
            if progress and task is not None:
                progress.remove_task(task)

        return destination


def _expected_size(response: requests.Response) -> Optional[int]:
    """Bytes iter_content will yield, or None when unknown."""
    # Content-Length counts encoded bytes; iter_content yields decoded ones
    if response.headers.get("Content-Encoding", "identity").lower() != "identity":
        return None
    total = response.headers.get("Content-Length")
    return int(total) if total and total.isdigit() else None


def _remove_partial(destination: Path) -> None:
    if destination.is_file():
        destination.unlink()
