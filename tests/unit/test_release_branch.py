"""Tests for ReleaseBranchManager — release and one-off branch creation."""

from __future__ import annotations

import pytest

from simdeploy.config import config
from simdeploy.core.release_branch import ReleaseBranchManager
from simdeploy.core.workspace import Workspace
from simdeploy.errors import BuildError, PreconditionError, ValidationError
from simdeploy.models.versioning import SimVersion

REPO = "example-sim"


class TestCreateRelease:
    def test_creates_branch_and_advances_main(
        self,
        release_manager: ReleaseBranchManager,
        workspace: Workspace,
        make_repo,
        fake_git,
        fake_build,
    ):
        make_repo(version="1.3.0-dev.5", brands=["phet", "phet-io", "adapted-from-phet"])
        created = release_manager.create_release(REPO, "1.3", ["phet", "phet-io"])

        assert created.branch == "1.3"
        assert created.version == SimVersion.parse("1.3.0-rc.0")
        assert created.main_version == SimVersion.parse("1.4.0-dev.0")
        assert created.brands == ["phet", "phet-io"]

        # ends on the release branch
        assert fake_git.current[REPO] == "1.3"
        assert workspace.get_version(REPO) == SimVersion.parse("1.3.0-rc.0")
        assert workspace.supported_brands(REPO) == ["phet", "phet-io"]
        assert workspace.dependencies(REPO)["comment"] == "# built for phet"
        assert fake_git.branch_version(REPO, "main") == SimVersion.parse("1.4.0-dev.0")

        assert fake_git.messages(REPO) == [
            "Updating supported brands to [phet,phet-io]",
            "Bumping version to 1.3.0-rc.0",
            "updated dependencies.json for phet, phet-io 1.3.0-rc.0",
            "Bumping version to 1.4.0-dev.0",
        ]
        assert [commit.branch for commit in fake_git.commits] == ["1.3", "1.3", "1.3", "main"]
        assert fake_git.has_remote_branch(REPO, "1.3")
        assert fake_build.npm_updates == [REPO, "chipper", "perennial-alias"]
        assert len(fake_build.builds) == 1

    def test_main_keeps_supported_brands(
        self, release_manager: ReleaseBranchManager, workspace: Workspace, make_repo, fake_git
    ):
        make_repo(version="1.3.0-dev.5", brands=["phet", "phet-io"])
        release_manager.create_release(REPO, "1.3", ["phet"])
        fake_git.checkout(REPO, "main")
        assert workspace.supported_brands(REPO) == ["phet", "phet-io"]

    def test_message_appended_to_version_commits(
        self, release_manager: ReleaseBranchManager, make_repo, fake_git
    ):
        make_repo(version="1.3.0-dev.5")
        release_manager.create_release(REPO, "1.3", ["phet"], message="see #12")
        assert "Bumping version to 1.3.0-rc.0, see #12" in fake_git.messages(REPO)

    @pytest.mark.parametrize("branch", ["main", "1.3.0", "0.9"])
    def test_invalid_branch_name(self, release_manager: ReleaseBranchManager, make_repo, branch: str):
        make_repo()
        with pytest.raises(ValidationError):
            release_manager.create_release(REPO, branch, ["phet"])

    def test_requires_brands(self, release_manager: ReleaseBranchManager, make_repo):
        make_repo()
        with pytest.raises(ValidationError) as info:
            release_manager.create_release(REPO, "1.3", [])
        assert info.value.field == "brands"

    def test_must_start_on_main(self, release_manager: ReleaseBranchManager, make_repo, fake_git):
        make_repo(version="1.2.0-rc.1", branch="1.2")
        with pytest.raises(PreconditionError, match="Should be on main"):
            release_manager.create_release(REPO, "1.3", ["phet"])
        assert fake_git.commits == []

    def test_existing_remote_branch(self, release_manager: ReleaseBranchManager, make_repo, fake_git):
        make_repo()
        fake_git.remote[REPO].add("1.3")
        with pytest.raises(PreconditionError, match="already exists"):
            release_manager.create_release(REPO, "1.3", ["phet"])

    def test_dirty_repo(self, release_manager: ReleaseBranchManager, make_repo, fake_git):
        make_repo()
        fake_git.dirty.add(REPO)
        with pytest.raises(PreconditionError, match="Unclean"):
            release_manager.create_release(REPO, "1.3", ["phet"])

    def test_build_with_missing_phetio_dependency(
        self, release_manager: ReleaseBranchManager, make_repo, fake_git, fake_build
    ):
        make_repo(version="1.3.0-dev.5")
        fake_build.output = "Building...\nWARNING404: phet-io dependency missing\n"
        with pytest.raises(BuildError):
            release_manager.create_release(REPO, "1.3", ["phet"])
        # the branch stays; main is never advanced
        assert fake_git.current[REPO] == "1.3"
        assert fake_git.branch_version(REPO, "main") == SimVersion.parse("1.3.0-dev.5")
        assert not any("dependencies.json" in message for message in fake_git.messages(REPO))


class TestToolchainRepos:
    def test_defaults_to_config(self, workspace: Workspace, fake_git, fake_build, monkeypatch):
        monkeypatch.setattr(config, "toolchain_repos", ["chipper"])
        manager = ReleaseBranchManager(workspace, fake_git, fake_build)
        assert manager._toolchain_repos == ["chipper"]

    def test_explicit_list_wins(self, workspace: Workspace, fake_git, fake_build):
        manager = ReleaseBranchManager(workspace, fake_git, fake_build, toolchain_repos=["a"])
        assert manager._toolchain_repos == ["a"]


class TestCreateOneOff:
    def test_creates_one_off(
        self, release_manager: ReleaseBranchManager, workspace: Workspace, make_repo, fake_git
    ):
        make_repo(version="1.5.2-dev.7")
        created = release_manager.create_one_off(REPO, "myFeature")

        assert created.version == SimVersion.parse("1.5.0-myFeature.0")
        assert created.main_version is None
        assert fake_git.current[REPO] == "myFeature"
        assert workspace.get_version(REPO) == SimVersion.parse("1.5.0-myFeature.0")
        assert fake_git.branch_version(REPO, "main") == SimVersion.parse("1.5.2-dev.7")
        assert fake_git.pushes == [(REPO, "myFeature"), (REPO, "myFeature")]
        assert fake_git.messages(REPO) == [
            "Bumping version to 1.5.0-myFeature.0",
            "updated dependencies.json for phet, phet-io 1.5.0-myFeature.0",
        ]
        assert all(commit.branch == "myFeature" for commit in fake_git.commits)

    def test_one_off_builds_and_refreshes_dependencies(
        self,
        release_manager: ReleaseBranchManager,
        workspace: Workspace,
        make_repo,
        fake_git,
        fake_build,
    ):
        make_repo(version="1.5.2-dev.7", brands=["phet"])
        created = release_manager.create_one_off(REPO, "myFeature")

        assert created.brands == ["phet"]
        assert fake_build.npm_updates == [REPO, "chipper", "perennial-alias"]
        assert len(fake_build.builds) == 1
        built_repo, options = fake_build.builds[0]
        assert built_repo == REPO
        assert options.brands == ["phet"]
        assert workspace.dependencies(REPO)["comment"] == "# built for phet"
        assert fake_git.commits[-1].paths == ["dependencies.json"]
        # main keeps its own dependencies.json
        fake_git.checkout(REPO, "main")
        assert workspace.dependencies(REPO)["comment"] == "# initial"

    def test_one_off_build_with_missing_phetio_dependency(
        self, release_manager: ReleaseBranchManager, make_repo, fake_git, fake_build
    ):
        make_repo(version="1.5.2-dev.7")
        fake_build.output = "Building...\nWARNING404: phet-io dependency missing\n"
        with pytest.raises(BuildError):
            release_manager.create_one_off(REPO, "myFeature")
        assert fake_git.messages(REPO) == ["Bumping version to 1.5.0-myFeature.0"]

    @pytest.mark.parametrize("branch", ["my-feature", "my.feature", ""])
    def test_invalid_name(self, release_manager: ReleaseBranchManager, make_repo, branch: str):
        make_repo()
        with pytest.raises(ValidationError) as info:
            release_manager.create_one_off(REPO, branch)
        assert info.value.field == "branch"

    def test_existing_branch(self, release_manager: ReleaseBranchManager, make_repo, fake_git):
        make_repo()
        fake_git.remote[REPO].add("myFeature")
        with pytest.raises(PreconditionError):
            release_manager.create_one_off(REPO, "myFeature")
