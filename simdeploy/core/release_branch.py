"""Release and one-off branch creation.

A release branch ``M.m`` is cut from ``main`` at ``M.m.0-rc.0``; ``main``
then moves on to ``M.m+1.0-dev.0``.  A one-off branch is cut from the
current checkout and versioned ``M.m.0-NAME.0``; ``main`` is left alone.

Neither operation compensates: a failure part-way leaves the branch and any
commits already pushed in place.
"""

from __future__ import annotations

import logging

from simdeploy.bridge.build import BuildService, check_build_output
from simdeploy.bridge.git import GitRepository
from simdeploy.config import config
from simdeploy.core.repo_actions import (
    set_repo_version,
    set_supported_brands,
    update_dependencies_json,
)
from simdeploy.core.version_policy import (
    MAIN_BRANCH,
    advanced_main_version,
    one_off_version,
    release_branch_version,
)
from simdeploy.core.workspace import Workspace
from simdeploy.errors import PreconditionError, ValidationError
from simdeploy.models.release import BuildOptions, ReleaseBranch
from simdeploy.models.versioning import SimVersion

logger = logging.getLogger(__name__)


class ReleaseBranchManager:
    """Creates release and one-off branches for a repository.

    Parameters
    ----------
    workspace:
        Access to the repo's ``package.json`` and build output.
    git:
        Git operations on the repo.
    build:
        Used to install packages and produce the initial build.
    toolchain_repos:
        Repos whose packages are refreshed before building.  Defaults to
        ``DeployConfig.toolchain_repos``.
    """

    def __init__(
        self,
        workspace: Workspace,
        git: GitRepository,
        build: BuildService,
        *,
        toolchain_repos: list[str] | None = None,
    ) -> None:
        self._workspace = workspace
        self._git = git
        self._build = build
        self._toolchain_repos = list(
            toolchain_repos if toolchain_repos is not None else config.toolchain_repos
        )

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _require_new_branch_from_main(self, repo: str, branch: str) -> None:
        if not self._git.is_clean(repo):
            raise PreconditionError(f"Unclean status in {repo}, cannot create branch {branch}")
        current = self._git.current_branch(repo)
        if current != MAIN_BRANCH:
            raise PreconditionError(
                f"Should be on {MAIN_BRANCH} to create branch {branch}, "
                f"not: {current or '(detached head)'}"
            )
        if self._git.has_remote_branch(repo, branch):
            raise PreconditionError(f"Branch {branch} already exists for {repo}, aborting")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_release(
        self,
        repo: str,
        branch: str,
        brands: list[str],
        message: str | None = None,
    ) -> ReleaseBranch:
        """Cut release branch *branch* (``MAJOR.MINOR``) from ``main``.

        Ends with the release branch checked out.
        """
        SimVersion.ensure_release_branch(branch)
        if not brands:
            raise ValidationError("At least one brand is required", field="brands")
        self._require_new_branch_from_main(repo, branch)

        version = release_branch_version(branch)
        logger.info("Creating release branch %s for %s at %s", branch, repo, version)

        self._git.create_branch(repo, branch)
        set_supported_brands(self._workspace, self._git, repo, brands)
        set_repo_version(self._workspace, self._git, repo, version, message)
        self._git.push(repo, branch)

        self._install_packages(repo)
        self._build_once(repo, brands)
        update_dependencies_json(self._workspace, self._git, repo, brands, str(version), branch)

        self._git.checkout(repo, MAIN_BRANCH)
        main_version = advanced_main_version(branch)
        set_repo_version(self._workspace, self._git, repo, main_version, message)
        self._git.push(repo, MAIN_BRANCH)

        self._git.checkout(repo, branch)
        logger.info("Release branch %s created; %s advanced to %s", branch, MAIN_BRANCH, main_version)
        return ReleaseBranch(
            repo=repo,
            branch=branch,
            brands=list(brands),
            version=version,
            main_version=main_version,
        )

    def create_one_off(
        self,
        repo: str,
        branch: str,
        message: str | None = None,
    ) -> ReleaseBranch:
        """Cut one-off branch *branch* from ``main``; ``main`` is not changed."""
        if not branch or "-" in branch or "." in branch:
            raise ValidationError(
                f"One-off branch names may not contain '-' or '.': {branch!r}",
                field="branch",
            )
        self._require_new_branch_from_main(repo, branch)

        version = one_off_version(self._workspace.get_version(repo), branch)
        logger.info("Creating one-off branch %s for %s at %s", branch, repo, version)

        self._git.create_branch(repo, branch)
        set_repo_version(self._workspace, self._git, repo, version, message)
        self._git.push(repo, branch)

        brands = self._workspace.supported_brands(repo) or ["phet"]
        self._install_packages(repo)
        self._build_once(repo, brands)
        update_dependencies_json(self._workspace, self._git, repo, brands, str(version), branch)
        return ReleaseBranch(
            repo=repo,
            branch=branch,
            brands=brands,
            version=version,
        )

    def _install_packages(self, repo: str) -> None:
        for name in [repo, *self._toolchain_repos]:
            self._build.npm_update(name)

    def _build_once(self, repo: str, brands: list[str]) -> None:
        output = self._build.build(repo, BuildOptions(brands=brands))
        logger.debug("Build output for %s:\n%s", repo, output)
        check_build_output(output)
