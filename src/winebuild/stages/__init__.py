"""Build stages, one per component of the archive."""

from winebuild.stages.dxvk import DxvkStage
from winebuild.stages.wine import WineStage
from winebuild.stages.winetricks import WinetricksStage

__all__ = ["DxvkStage", "WineStage", "WinetricksStage"]
