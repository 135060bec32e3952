"""
Build configuration models.

Describes where every component comes from and where the result goes.
The defaults reproduce the standard wine-build.txz; a JSON file with the
same shape can override any part of it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from winebuild.github import LATEST, AssetSelector, ExactName, TagTemplate
from winebuild.tools import REQUIRED_COMMANDS


class WineSource(BaseModel):
    """Where the macOS Wine build comes from."""
    repository: str = Field(default="Gcenx/macOS_Wine_builds")
    selector: str = Field(default=LATEST, description="'latest' or a release tag")
    asset: AssetSelector = Field(default_factory=lambda: TagTemplate(template="wine-devel-{tag}-osx64.tar.xz"))
    payload_path: str = Field(
        default="Wine Devel.app/Contents/Resources/wine",
        description="Directory inside the archive that becomes wine/",
    )


class MoltenVKSource(BaseModel):
    """Where the replacement libMoltenVK.dylib comes from."""
    repository: str = Field(default="KhronosGroup/MoltenVK")
    selector: str = Field(default=LATEST)
    asset: AssetSelector = Field(default_factory=lambda: ExactName(name="MoltenVK-macos.tar"))
    dylib_path: str = Field(
        default="MoltenVK/MoltenVK/dylib/macOS/libMoltenVK.dylib",
        description="Location of the dylib inside the extracted archive",
    )
    target_path: str = Field(
        default="lib/libMoltenVK.dylib",
        description="Location of the dylib inside wine/",
    )


class DxvkSource(BaseModel):
    """Where DXVK-macOS comes from."""
    repository: str = Field(default="Gcenx/DXVK-macOS")
    selector: str = Field(default=LATEST)
    asset: AssetSelector = Field(default_factory=lambda: TagTemplate(template="dxvk-macOS-async-{tag}.tar.gz"))
    strip_components: int = Field(default=1, ge=0)


class WinetricksSource(BaseModel):
    """Raw URLs for winetricks and its verb catalog."""
    script_url: str = Field(
        default="https://raw.githubusercontent.com/Winetricks/winetricks/master/src/winetricks"
    )
    verbs_url: str = Field(
        default="https://raw.githubusercontent.com/Winetricks/winetricks/master/files/verbs/all.txt"
    )


class BuildConfig(BaseModel):
    """
    Complete build configuration.

    Relative paths are resolved against the invocation directory.
    """
    schema_version: str = Field(default="1")
    wine: WineSource = Field(default_factory=WineSource)
    moltenvk: MoltenVKSource = Field(default_factory=MoltenVKSource)
    dxvk: DxvkSource = Field(default_factory=DxvkSource)
    winetricks: WinetricksSource = Field(default_factory=WinetricksSource)
    patches_dir: Path = Field(
        default=Path("lib/GPTK/redist/lib"),
        description="Directory merge-copied onto wine/lib",
    )
    output: Path = Field(default=Path("wine-build.txz"))
    required_commands: list[str] = Field(default_factory=lambda: list(REQUIRED_COMMANDS))
    http_timeout: Optional[float] = Field(default=None, description="Seconds; None blocks indefinitely")

    def save(self, path: Path | str) -> None:
        """Save configuration as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, path: Path | str) -> BuildConfig:
        """Load configuration from a JSON file."""
        data = json.loads(Path(path).read_text())
        return cls.model_validate(data)

    def resolve_paths(self, base: Path | str) -> BuildConfig:
        """Return a copy with relative paths anchored at base."""
        base = Path(base)
        return self.model_copy(update={
            "patches_dir": self.patches_dir if self.patches_dir.is_absolute() else base / self.patches_dir,
            "output": self.output if self.output.is_absolute() else base / self.output,
        })
