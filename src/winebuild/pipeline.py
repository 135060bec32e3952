"""
Assembly pipeline - turns release downloads into the dist/ tree and
packs it.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from winebuild.archive import ArchiveExtractor
from winebuild.config import BuildConfig
from winebuild.errors import AssemblyError
from winebuild.fetch import Fetcher
from winebuild.github import ReleaseResolver
from winebuild.packager import Packager
from winebuild.tools import check_commands

if TYPE_CHECKING:
    from rich.progress import Progress

logger = logging.getLogger(__name__)


class WorkingTree:
    """
    Temporary directory the build is assembled in.

    Usage:
        with WorkingTree() as tree:
            tree.dist          # becomes the archive payload
            tree.scratch("wine")

    The whole directory is removed when the block exits, whether it
    finished normally or raised.
    """

    def __init__(self, prefix: str = "winebuild-"):
        self.prefix = prefix
        self._tmpdir: tempfile.TemporaryDirectory | None = None

    def __enter__(self) -> WorkingTree:
        self._tmpdir = tempfile.TemporaryDirectory(prefix=self.prefix)
        self.dist.mkdir()
        logger.info(f"Folder location: {self.dist}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._tmpdir is not None:
            logger.debug(f"Removing {self.root}")
            self._tmpdir.cleanup()
            self._tmpdir = None

    @property
    def root(self) -> Path:
        if self._tmpdir is None:
            raise RuntimeError("WorkingTree is not active")
        return Path(self._tmpdir.name)

    @property
    def dist(self) -> Path:
        return self.root / "dist"

    def scratch(self, name: str) -> Path:
        """A fresh directory for intermediate extraction, outside dist/."""
        path = self.root / "scratch" / name
        discard(path)
        try:
            path.mkdir(parents=True)
        except OSError as e:
            raise AssemblyError(f"Could not create {path}: {e}") from e
        return path

    def download_path(self, name: str) -> Path:
        """Where a downloaded file should be written."""
        path = self.root / "downloads" / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AssemblyError(f"Could not create {path.parent}: {e}") from e
        return path


def merge_copy(source: Path, destination: Path) -> None:
    """Recursively copy source onto destination; incoming files win."""
    try:
        shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise AssemblyError(f"Could not merge {source} into {destination}: {e}") from e


def move(source: Path, destination: Path) -> None:
    """Move a file or directory, replacing a file already at destination."""
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if destination.is_file() or destination.is_symlink():
            destination.unlink()
        shutil.move(str(source), str(destination))
    except (OSError, shutil.Error) as e:
        raise AssemblyError(f"Could not move {source} to {destination}: {e}") from e


def discard(*paths: Path) -> None:
    """Delete intermediate files and directories."""
    for path in paths:
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as e:
            raise AssemblyError(f"Could not remove {path}: {e}") from e


class Stage(ABC):
    """
    One independent part of the build.

    A stage writes only below dist/<output_dir>, so stages can run in any
    order or at the same time.
    """

    name: str = ""
    output_dir: str = ""

    def __init__(
        self,
        config: BuildConfig,
        resolver: ReleaseResolver,
        fetcher: Fetcher,
        extractor: ArchiveExtractor,
        progress: Progress | None = None,
    ):
        self.config = config
        self.resolver = resolver
        self.fetcher = fetcher
        self.extractor = extractor
        self.progress = progress

    def output_path(self, tree: WorkingTree) -> Path:
        return tree.dist / self.output_dir

    @abstractmethod
    def assemble(self, tree: WorkingTree) -> Path:
        """Populate this stage's part of the tree and return it."""
        pass


class AssemblyPipeline:
    """
    Build wine-build.txz end to end.

    Usage:
        pipeline = AssemblyPipeline(BuildConfig().resolve_paths(Path.cwd()))
        pipeline.run()
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        resolver: ReleaseResolver | None = None,
        fetcher: Fetcher | None = None,
        extractor: ArchiveExtractor | None = None,
        packager: Packager | None = None,
        progress: Progress | None = None,
    ):
        self.config = config or BuildConfig()
        self.resolver = resolver or ReleaseResolver(timeout=self.config.http_timeout)
        self.fetcher = fetcher or Fetcher(timeout=self.config.http_timeout)
        self.extractor = extractor or ArchiveExtractor()
        self.packager = packager or Packager()
        self.progress = progress

    def stages(self) -> list[Stage]:
        """Stages in reference order: Wine, DXVK, winetricks."""
        from winebuild.stages import DxvkStage, WineStage, WinetricksStage

        return [
            stage_class(self.config, self.resolver, self.fetcher, self.extractor, self.progress)
            for stage_class in (WineStage, DxvkStage, WinetricksStage)
        ]

    def assemble(self, tree: WorkingTree, parallel: bool = False) -> Path:
        """Run every stage into tree.dist."""
        stages = self.stages()

        if not parallel:
            for stage in stages:
                stage.assemble(tree)
            return tree.dist

        with ThreadPoolExecutor(max_workers=len(stages)) as executor:
            futures = [executor.submit(stage.assemble, tree) for stage in stages]
            # Re-raise the first failure in stage order
            errors = [f.exception() for f in futures]
        for error in errors:
            if error is not None:
                raise error
        return tree.dist

    def run(self, output: Path | str | None = None, parallel: bool = False) -> Path:
        """
        Check tools, assemble, and package.

        Returns:
            Path to the written archive

        Raises:
            WineBuildError: On any failure; no archive is written
        """
        output = Path(output) if output else self.config.output
        check_commands(self.config.required_commands)

        with WorkingTree() as tree:
            self.assemble(tree, parallel=parallel)
            return self.packager.package(tree.dist, output)
