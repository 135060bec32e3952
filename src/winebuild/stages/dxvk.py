"""DXVK stage."""

from __future__ import annotations

import logging
from pathlib import Path

from winebuild.pipeline import Stage, WorkingTree, discard

logger = logging.getLogger(__name__)


class DxvkStage(Stage):
    """Assemble dxvk/ from the latest DXVK-macOS release."""

    name = "DXVK"
    output_dir = "dxvk"

    def assemble(self, tree: WorkingTree) -> Path:
        cfg = self.config.dxvk
        dxvk_dir = self.output_path(tree)

        asset = self.resolver.resolve_asset(cfg.repository, cfg.selector, cfg.asset)

        logger.info(f"Downloading DXVK version {asset.name}")
        archive = self.fetcher.download(
            asset.download_url, tree.download_path("dxvk-download.tar.gz"), self.progress
        )

        logger.info("Extracting DXVK")
        # Upstream wraps everything in one top-level directory
        self.extractor.extract(
            archive, dxvk_dir, strip_components=cfg.strip_components, compression="gz"
        )
        discard(archive)

        logger.info(f"{self.name} has been created")
        return dxvk_dir
