"""
winebuild - package the latest macOS Wine, MoltenVK, DXVK and winetricks
into a single wine-build.txz.

Example usage:
    from pathlib import Path
    from winebuild import AssemblyPipeline, BuildConfig

    config = BuildConfig().resolve_paths(Path.cwd())
    AssemblyPipeline(config).run()
"""

__version__ = "0.1.0"

from winebuild.config import BuildConfig
from winebuild.errors import (
    AssemblyError,
    ExtractionError,
    FetchError,
    MissingToolError,
    PackagingError,
    ResolutionError,
    WineBuildError,
)
from winebuild.github import ExactName, ReleaseResolver, TagTemplate
from winebuild.pipeline import AssemblyPipeline, WorkingTree

__all__ = [
    "AssemblyError",
    "AssemblyPipeline",
    "BuildConfig",
    "ExactName",
    "ExtractionError",
    "FetchError",
    "MissingToolError",
    "PackagingError",
    "ReleaseResolver",
    "ResolutionError",
    "TagTemplate",
    "WineBuildError",
    "WorkingTree",
]
