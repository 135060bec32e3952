import io
import json
import tarfile
from pathlib import Path

import pytest
import requests

from winebuild.config import BuildConfig


def make_response(status=200, content=b"", json_data=None, headers=None):
    """Build a fully-read requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    response._content = json.dumps(json_data).encode() if json_data is not None else content
    response._content_consumed = True
    response.headers.update(headers or {})
    return response


def make_tarball(path, entries, mode="w"):
    """Write a tar archive containing {name: bytes} entries."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, mode) as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


class FakeSession(requests.Session):
    """Session answering GETs from a {url: Response} table."""

    def __init__(self, routes=None):
        super().__init__()
        self.routes = dict(routes or {})
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        if url not in self.routes:
            return make_response(404, json_data={"message": "Not Found"})
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        return route


def release(tag, *asset_names, base="https://example.invalid/download"):
    """Release JSON as returned by the GitHub API."""
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "assets": [
            {"name": name, "browser_download_url": f"{base}/{tag}/{name}", "size": 1}
            for name in asset_names
        ],
    }


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def upstream(tmp_path):
    """
    Archives and API responses imitating the real upstream releases.

    Returns a FakeSession that serves release metadata and asset bodies.
    """
    archives = tmp_path / "upstream"

    wine_tar = make_tarball(
        archives / "wine.tar.xz",
        {
            "Wine Devel.app/Contents/Resources/wine/bin/wine": b"#!wine",
            "Wine Devel.app/Contents/Resources/wine/lib/libMoltenVK.dylib": b"old moltenvk",
            "Wine Devel.app/Contents/Resources/wine/lib/libwine.dylib": b"libwine",
            "Wine Devel.app/Contents/Info.plist": b"plist",
        },
        mode="w:xz",
    )
    mvk_tar = make_tarball(
        archives / "moltenvk.tar",
        {
            "MoltenVK/MoltenVK/dylib/macOS/libMoltenVK.dylib": b"new moltenvk",
            "MoltenVK/LICENSE": b"apache",
        },
    )
    dxvk_tar = make_tarball(
        archives / "dxvk.tar.gz",
        {
            "dxvk-macOS-async-v1.10.3/x64/d3d11.dll": b"d3d11 x64",
            "dxvk-macOS-async-v1.10.3/x32/d3d11.dll": b"d3d11 x32",
        },
        mode="w:gz",
    )

    wine_release = release("10.0", "wine-devel-10.0-osx64.tar.xz", "wine-stable-10.0-osx64.tar.xz")
    mvk_release = release("v1.2.11", "MoltenVK-macos.tar", "MoltenVK-ios.tar")
    dxvk_release = release("v1.10.3", "dxvk-macOS-async-v1.10.3.tar.gz", "dxvk-macOS-v1.10.3.tar.gz")

    api = "https://api.github.com/repos"
    raw = "https://raw.githubusercontent.com/Winetricks/winetricks/master"
    session = FakeSession({
        f"{api}/Gcenx/macOS_Wine_builds/releases/latest": make_response(json_data=wine_release),
        f"{api}/KhronosGroup/MoltenVK/releases/latest": make_response(json_data=mvk_release),
        f"{api}/Gcenx/DXVK-macOS/releases/latest": make_response(json_data=dxvk_release),
        wine_release["assets"][0]["browser_download_url"]: make_response(content=wine_tar.read_bytes()),
        mvk_release["assets"][0]["browser_download_url"]: make_response(content=mvk_tar.read_bytes()),
        dxvk_release["assets"][0]["browser_download_url"]: make_response(content=dxvk_tar.read_bytes()),
        f"{raw}/src/winetricks": make_response(content=b"#!/bin/sh\necho winetricks\n"),
        f"{raw}/files/verbs/all.txt": make_response(content=b"vcrun2019\nd3dx9\n"),
    })
    return session


@pytest.fixture
def patches_dir(tmp_path):
    """A GPTK-style patch directory."""
    patches = tmp_path / "patches"
    (patches / "external").mkdir(parents=True)
    (patches / "external" / "D3DMetal.framework").write_bytes(b"d3dmetal")
    (patches / "libwine.dylib").write_bytes(b"patched libwine")
    return patches


@pytest.fixture
def build_config(tmp_path, patches_dir):
    return BuildConfig(patches_dir=patches_dir, output=tmp_path / "wine-build.txz")


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Point tempfile at an empty directory so leftovers can be detected."""
    import tempfile

    scratch = tmp_path / "tmp"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture(autouse=True)
def reset_winebuild_logger():
    """Undo the CLI's handler setup so caplog sees library records."""
    import logging

    yield
    logger = logging.getLogger("winebuild")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
