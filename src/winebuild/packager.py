"""
Final archive creation.

Packs the assembled dist/ tree into one xz-compressed tarball.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
from pathlib import Path

from winebuild.errors import PackagingError

logger = logging.getLogger(__name__)


class Packager:
    """
    Archive the contents of a directory.

    Entries are stored relative to the source directory, so the archive
    root lists its children directly with no wrapper directory.
    """

    def __init__(self, compression: str = "xz"):
        self.compression = compression

    def package(self, source_dir: Path | str, output_path: Path | str) -> Path:
        """Create the archive and move it to output_path, replacing any old one."""
        source_dir = Path(source_dir)
        output_path = Path(output_path)

        if not source_dir.is_dir():
            raise PackagingError(f"Nothing to package: {source_dir} is not a directory")

        logger.info("Creating the tarball")
        try:
            with tempfile.TemporaryDirectory(prefix="winebuild-pack-", dir=source_dir.parent) as tmpdir:
                tmp_archive = Path(tmpdir) / "build.txz"

                with tarfile.open(tmp_archive, f"w:{self.compression}") as tar:
                    for item in sorted(source_dir.iterdir()):
                        tar.add(item, arcname=item.name)

                output_path.parent.mkdir(parents=True, exist_ok=True)
                if output_path.exists():
                    output_path.unlink()
                shutil.move(str(tmp_archive), str(output_path))
        except (OSError, tarfile.TarError) as e:
            raise PackagingError(f"Could not create {output_path}: {e}") from e

        logger.info(f"{output_path.name} has been created")
        return output_path
