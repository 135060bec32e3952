"""
GitHub release resolution.

Looks up release metadata through the GitHub REST API and picks the
download URL of one asset out of it.
"""

from __future__ import annotations

import logging
from typing import Annotated, Literal, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from winebuild.errors import ResolutionError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
LATEST = "latest"


class ReleaseQuery(BaseModel):
    """A repository plus a version selector ("latest" or a tag name)."""
    model_config = ConfigDict(frozen=True)

    repository: str = Field(description="Repository in 'owner/name' form")
    selector: str = Field(default=LATEST, description="'latest' or an explicit tag")

    @property
    def api_path(self) -> str:
        if self.selector == LATEST:
            return f"repos/{self.repository}/releases/latest"
        return f"repos/{self.repository}/releases/tags/{self.selector}"


class ReleaseAsset(BaseModel):
    """A downloadable file attached to a release."""
    name: str
    download_url: str = Field(alias="browser_download_url")


class ReleaseMetadata(BaseModel):
    """Read-only view of the release JSON returned by the API."""
    tag_name: str
    assets: list[ReleaseAsset] = Field(default_factory=list)


class ExactName(BaseModel):
    """Select the asset with exactly this name."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["exact"] = "exact"
    name: str

    def asset_name(self, tag: str) -> str:
        return self.name


class TagTemplate(BaseModel):
    """Select the asset whose name is the template with {tag} filled in."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["template"] = "template"
    template: str = Field(description="Asset name containing a {tag} placeholder")

    def asset_name(self, tag: str) -> str:
        return self.template.replace("{tag}", tag)


AssetSelector = Annotated[Union[ExactName, TagTemplate], Field(discriminator="kind")]


class ResolvedAsset(BaseModel):
    """The outcome of a successful resolution."""
    model_config = ConfigDict(frozen=True)

    repository: str
    tag: str
    name: str
    download_url: str


class ReleaseResolver:
    """
    Resolve release assets to download URLs.

    Usage:
        resolver = ReleaseResolver()
        asset = resolver.resolve_asset(
            "Gcenx/DXVK-macOS", "latest", TagTemplate(template="dxvk-macOS-async-{tag}.tar.gz")
        )
        print(asset.download_url)

    A single failed request is fatal; there is no retry and no handling of
    the anonymous API rate limit.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        api_url: str = GITHUB_API_URL,
        timeout: Optional[float] = None,
    ):
        self.session = session or requests.Session()
        # Keep a caller's explicit Accept header, replace the requests default
        if self.session.headers.get("Accept", "*/*") == "*/*":
            self.session.headers["Accept"] = "application/vnd.github+json"
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def resolve_asset(
        self,
        repository: str,
        selector: str,
        asset_selector: ExactName | TagTemplate,
    ) -> ResolvedAsset:
        """Fetch release metadata and return the single matching asset."""
        query = ReleaseQuery(repository=repository, selector=selector)
        release = self.fetch_release(query)
        asset = self.select_asset(release, asset_selector)
        logger.debug(f"Resolved {repository}@{release.tag_name} -> {asset.download_url}")
        return ResolvedAsset(
            repository=repository,
            tag=release.tag_name,
            name=asset.name,
            download_url=asset.download_url,
        )

    def fetch_release(self, query: ReleaseQuery) -> ReleaseMetadata:
        """Retrieve release metadata for a query."""
        url = f"{self.api_url}/{query.api_path}"
        logger.debug(f"Fetching release data from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ResolutionError(
                f"Could not get the {query.selector} release data for {query.repository}: {e}"
            ) from e

        if not response.ok:
            raise ResolutionError(
                f"Could not get the {query.selector} release data for {query.repository}: "
                f"HTTP {response.status_code} {_api_message(response)}".rstrip()
            )

        try:
            return ReleaseMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResolutionError(
                f"Malformed release data for {query.repository}: {e}"
            ) from e

    def select_asset(
        self,
        release: ReleaseMetadata,
        asset_selector: ExactName | TagTemplate,
    ) -> ReleaseAsset:
        """
        Pick exactly one asset from a release.

        Raises:
            ResolutionError: If no asset or more than one asset matches
        """
        wanted = asset_selector.asset_name(release.tag_name)
        matches = [asset for asset in release.assets if asset.name == wanted]

        if not matches:
            raise ResolutionError(
                f"No asset named {wanted} in release {release.tag_name}"
            )
        if len(matches) > 1:
            raise ResolutionError(
                f"{len(matches)} assets named {wanted} in release {release.tag_name}"
            )
        return matches[0]


def _api_message(response: requests.Response) -> str:
    """Extract the 'message' field GitHub puts in error bodies."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""
