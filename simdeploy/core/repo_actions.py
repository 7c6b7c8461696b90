"""Composite repo edits shared by the orchestrator and the branch manager.

Each action edits a state file through the ``Workspace`` and records the
edit through the ``GitRepository``.
"""

from __future__ import annotations

import logging

from simdeploy.bridge.git import GitRepository
from simdeploy.core.workspace import DEPENDENCIES_JSON, PACKAGE_JSON, Workspace
from simdeploy.models.versioning import SimVersion

logger = logging.getLogger(__name__)


def version_commit_message(version: SimVersion, message: str | None = None) -> str:
    text = f"Bumping version to {version}"
    if message:
        text += f", {message}"
    return text


def set_repo_version(
    workspace: Workspace,
    git: GitRepository,
    repo: str,
    version: SimVersion,
    message: str | None = None,
) -> None:
    """Write *version* into ``package.json`` and commit it (no push)."""
    workspace.set_version(repo, version)
    git.commit(repo, version_commit_message(version, message), [PACKAGE_JSON])
    logger.info("%s version set to %s", repo, version)


def set_supported_brands(
    workspace: Workspace,
    git: GitRepository,
    repo: str,
    brands: list[str],
) -> None:
    workspace.set_supported_brands(repo, brands)
    git.commit(repo, f"Updating supported brands to [{','.join(brands)}]", [PACKAGE_JSON])


def update_dependencies_json(
    workspace: Workspace,
    git: GitRepository,
    repo: str,
    brands: list[str],
    version: str,
    branch: str,
) -> None:
    """Move the build's ``dependencies.json`` into the repo, commit and push."""
    workspace.copy_build_dependencies(repo, brands[0])
    git.commit(
        repo,
        f"updated dependencies.json for {', '.join(brands)} {version}",
        [DEPENDENCIES_JSON],
    )
    git.push(repo, branch)
