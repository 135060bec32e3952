"""
Archive extraction using the host tar.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from winebuild.errors import ExtractionError

logger = logging.getLogger(__name__)

# Compression flag mapping
COMPRESSION_FLAGS = {
    "xz": ["-J"],
    "gz": ["-z"],
    None: [],
}


class ArchiveExtractor:
    """
    Extract tar-family archives.

    The caller chooses the compression ("xz", "gz" or None for plain tar);
    the archive content is not sniffed.

    Usage:
        extractor = ArchiveExtractor()
        extractor.extract("dxvk.tar.gz", "dist/dxvk", strip_components=1, compression="gz")
    """

    def __init__(self, tar_command: str = "tar"):
        self.tar_command = tar_command

    def extract(
        self,
        archive_path: Path | str,
        destination: Path | str,
        strip_components: int = 0,
        compression: Optional[str] = None,
    ) -> Path:
        """Extract an archive into destination, creating it if needed."""
        archive_path = Path(archive_path)
        destination = Path(destination)

        if compression not in COMPRESSION_FLAGS:
            raise ExtractionError(f"Unsupported compression: {compression}")
        if strip_components < 0:
            raise ExtractionError(f"strip_components must be >= 0, got {strip_components}")
        if not archive_path.is_file():
            raise ExtractionError(f"Archive not found: {archive_path}")

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"Cannot create {destination}: {e}") from e

        cmd = [
            self.tar_command,
            "-x",
            *COMPRESSION_FLAGS[compression],
            "-f", str(archive_path),
            "-C", str(destination),
        ]
        if strip_components:
            cmd.append(f"--strip-components={strip_components}")

        logger.debug(f"Running {' '.join(cmd)}")
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except subprocess.CalledProcessError as e:
            raise ExtractionError(
                f"Could not extract {archive_path.name}: {e.stderr.decode(errors='replace').strip()}"
            ) from e
        except FileNotFoundError as e:
            raise ExtractionError(f"{self.tar_command} is not available: {e}") from e

        return destination
