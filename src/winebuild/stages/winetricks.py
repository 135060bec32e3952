"""Winetricks stage."""

from __future__ import annotations

import logging
import stat
from pathlib import Path

from winebuild.errors import AssemblyError
from winebuild.pipeline import Stage, WorkingTree

logger = logging.getLogger(__name__)


class WinetricksStage(Stage):
    """Download the winetricks script and its verb catalog into winetricks/."""

    name = "winetricks"
    output_dir = "winetricks"

    def assemble(self, tree: WorkingTree) -> Path:
        cfg = self.config.winetricks
        out_dir = self.output_path(tree)

        logger.info("Downloading winetricks")
        script = self.fetcher.download(cfg.script_url, out_dir / "winetricks", self.progress)
        try:
            script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise AssemblyError(f"Could not mark {script} executable: {e}") from e

        self.fetcher.download(cfg.verbs_url, out_dir / "verbs.txt", self.progress)

        logger.info(f"{self.name} has been created")
        return out_dir
