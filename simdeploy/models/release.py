"""Release branch, version proposal and build-server request models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from simdeploy.models.versioning import SimVersion


class VersionProposal(BaseModel):
    """Outcome of the version policy for one deploy."""

    model_config = ConfigDict(frozen=True)

    previous: SimVersion
    proposed: SimVersion
    changed: bool


class ReleaseBranch(BaseModel):
    """A release (``MAJOR.MINOR``) or one-off branch of a repository."""

    model_config = ConfigDict(frozen=True)

    repo: str
    branch: str
    brands: list[str] = []
    version: SimVersion
    main_version: SimVersion | None = None  # set when main was advanced


class BuildOptions(BaseModel):
    """Flags handed to the build service."""

    model_config = ConfigDict(frozen=True)

    brands: list[str]
    minify: bool = True
    all_html: bool = False
    debug_html: bool = False


class BuildServerRequest(BaseModel):
    """Body of ``POST /deploy-html-simulation`` (build-server API 2.0).

    ``dependencies`` is the JSON text of the repo's ``dependencies.json``;
    the build server parses it on receipt.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api: str = "2.0"
    dependencies: str
    sim_name: str = Field(alias="simName")
    version: str
    locales: list[str] | str
    servers: list[str]
    brands: list[str]
    branch: str
    authorization_code: str = Field(alias="authorizationCode")
    email: str | None = None

    def to_payload(self) -> dict:
        """JSON-ready body with wire (camelCase) keys; ``email`` omitted when unset."""
        return self.model_dump(by_alias=True, exclude_none=True)
