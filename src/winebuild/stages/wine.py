"""
Wine stage.

Produces dist/wine from the latest macOS Wine build, swaps in the
current MoltenVK and merges the GPTK patch libraries on top.
"""

from __future__ import annotations

import logging
from pathlib import Path

from winebuild.errors import ExtractionError
from winebuild.pipeline import Stage, WorkingTree, discard, merge_copy, move

logger = logging.getLogger(__name__)


class WineStage(Stage):
    """Assemble wine/."""

    name = "Wine"
    output_dir = "wine"

    def assemble(self, tree: WorkingTree) -> Path:
        wine_cfg = self.config.wine
        mvk_cfg = self.config.moltenvk
        wine_dir = self.output_path(tree)

        # Resolve both releases before downloading anything
        wine_asset = self.resolver.resolve_asset(wine_cfg.repository, wine_cfg.selector, wine_cfg.asset)
        mvk_asset = self.resolver.resolve_asset(mvk_cfg.repository, mvk_cfg.selector, mvk_cfg.asset)

        logger.info(f"Downloading Wine version {wine_asset.name}")
        wine_archive = self.fetcher.download(
            wine_asset.download_url, tree.download_path("wine-download.tar.xz"), self.progress
        )
        logger.info("Extracting Wine")
        wine_scratch = tree.scratch("wine")
        self.extractor.extract(wine_archive, wine_scratch, compression="xz")

        payload = wine_scratch / wine_cfg.payload_path
        if not payload.is_dir():
            raise ExtractionError(f"{wine_cfg.payload_path} not found in {wine_asset.name}")
        move(payload, wine_dir)
        discard(wine_archive, wine_scratch)

        logger.info(f"Downloading MoltenVK {mvk_asset.tag}")
        mvk_archive = self.fetcher.download(
            mvk_asset.download_url, tree.download_path("moltenvk-download.tar"), self.progress
        )
        logger.info("Extracting MoltenVK")
        mvk_scratch = tree.scratch("MoltenVK")
        self.extractor.extract(mvk_archive, mvk_scratch)

        dylib = mvk_scratch / mvk_cfg.dylib_path
        if not dylib.is_file():
            raise ExtractionError(f"{mvk_cfg.dylib_path} not found in {mvk_asset.name}")
        move(dylib, wine_dir / mvk_cfg.target_path)
        discard(mvk_archive, mvk_scratch)

        self._apply_patches(wine_dir / "lib")

        logger.info(f"{self.name} has been created")
        return wine_dir

    def _apply_patches(self, lib_dir: Path) -> None:
        """Merge the patch directory onto wine/lib."""
        patches = self.config.patches_dir
        if not patches.is_dir():
            logger.warning(f"Patch directory {patches} not found, skipping GPTK patches")
            return

        logger.info("Applying Apple GPTK patches")
        merge_copy(patches, lib_dir)
