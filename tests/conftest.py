"""Shared test fixtures for simdeploy.

Every bridge protocol has an in-memory fake here.  ``FakeGit`` keeps one
copy of each repo's state files per branch, so checking out a branch
swaps ``package.json`` / ``dependencies.json`` the way a real checkout would.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from simdeploy.config import DeployConfig
from simdeploy.core.orchestrator import DeployOrchestrator
from simdeploy.core.release_branch import ReleaseBranchManager
from simdeploy.core.workspace import DEPENDENCIES_JSON, PACKAGE_JSON, Workspace
from simdeploy.errors import DeployError, GitOperationError
from simdeploy.models.release import BuildOptions, BuildServerRequest
from simdeploy.models.versioning import SimVersion

REPO = "example-sim"
TRACKED_FILES = (PACKAGE_JSON, DEPENDENCIES_JSON)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


@dataclass
class FakeCommit:
    repo: str
    branch: str
    message: str
    paths: list[str]


class FakeGit:
    """Branch-aware in-memory ``GitRepository``."""

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace
        self.current: dict[str, str | None] = {}
        self.snapshots: dict[tuple[str, str], dict[str, str | None]] = {}
        self.remote: dict[str, set[str]] = {}
        self.dirty: set[str] = set()
        self.head_shas: dict[str, str] = {}
        self.remote_shas: dict[tuple[str, str], str] = {}
        self.commits: list[FakeCommit] = []
        self.pushes: list[tuple[str, str]] = []
        self.checkouts: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], DeployError] = {}

    # -- test helpers ---------------------------------------------------

    def register_branch(self, repo: str, branch: str, *, remote: bool = True) -> None:
        """Record the repo's current files as *branch* and make it current."""
        self.snapshots[(repo, branch)] = self._read_files(repo)
        self.current[repo] = branch
        if remote:
            self.remote.setdefault(repo, set()).add(branch)

    def fail(self, operation: str, argument: str, error: DeployError | None = None) -> None:
        """Make ``operation`` (e.g. ``"checkout"``) fail for *argument*."""
        self.failures[(operation, argument)] = error or GitOperationError(
            f"git {operation} {argument} failed"
        )

    def branch_version(self, repo: str, branch: str) -> SimVersion:
        if self.current.get(repo) == branch:
            return self.workspace.get_version(repo)
        package = json.loads(self.snapshots[(repo, branch)][PACKAGE_JSON])
        return SimVersion.parse(package["version"])

    def messages(self, repo: str) -> list[str]:
        return [commit.message for commit in self.commits if commit.repo == repo]

    # -- internals --------------------------------------------------------

    def _check(self, operation: str, argument: str) -> None:
        error = self.failures.get((operation, argument))
        if error is not None:
            raise error

    def _read_files(self, repo: str) -> dict[str, str | None]:
        files: dict[str, str | None] = {}
        for name in TRACKED_FILES:
            path = self.workspace.repo_path(repo) / name
            files[name] = path.read_text(encoding="utf-8") if path.exists() else None
        return files

    def _write_files(self, repo: str, files: dict[str, str | None]) -> None:
        for name, text in files.items():
            path = self.workspace.repo_path(repo) / name
            if text is None:
                path.unlink(missing_ok=True)
            else:
                path.write_text(text, encoding="utf-8")

    # -- GitRepository ----------------------------------------------------

    def is_clean(self, repo: str) -> bool:
        return repo not in self.dirty

    def current_branch(self, repo: str) -> str | None:
        return self.current.get(repo, "main")

    def checkout(self, repo: str, branch: str) -> None:
        self._check("checkout", branch)
        if (repo, branch) not in self.snapshots and branch not in self.remote.get(repo, set()):
            raise GitOperationError(f"pathspec '{branch}' did not match in {repo}")
        current = self.current_branch(repo)
        if current is not None:
            self.snapshots[(repo, current)] = self._read_files(repo)
        if (repo, branch) in self.snapshots:
            self._write_files(repo, self.snapshots[(repo, branch)])
        self.current[repo] = branch
        self.checkouts.append((repo, branch))

    def create_branch(self, repo: str, branch: str) -> None:
        self._check("create_branch", branch)
        current = self.current_branch(repo)
        if current is not None:
            self.snapshots[(repo, current)] = self._read_files(repo)
        self.snapshots[(repo, branch)] = self._read_files(repo)
        self.current[repo] = branch

    def has_remote_branch(self, repo: str, branch: str) -> bool:
        return branch in self.remote.get(repo, set())

    def head_sha(self, repo: str) -> str:
        return self.head_shas.get(repo, "a" * 40)

    def remote_branch_sha(self, repo: str, branch: str) -> str | None:
        if not self.has_remote_branch(repo, branch):
            return None
        return self.remote_shas.get((repo, branch), "a" * 40)

    def commit(self, repo: str, message: str, paths: list[str]) -> None:
        self._check("commit", repo)
        branch = self.current_branch(repo) or "(detached)"
        self.commits.append(FakeCommit(repo, branch, message, list(paths)))

    def push(self, repo: str, branch: str) -> None:
        self._check("push", branch)
        self.remote.setdefault(repo, set()).add(branch)
        self.pushes.append((repo, branch))


class FakeBuild:
    """``BuildService`` that writes ``build/<brand>/dependencies.json``."""

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace
        self.npm_updates: list[str] = []
        self.lints: list[str] = []
        self.builds: list[tuple[str, BuildOptions]] = []
        self.output = "Done."
        self.error: DeployError | None = None

    def npm_update(self, repo: str) -> None:
        self.npm_updates.append(repo)

    def lint(self, repo: str) -> None:
        self.lints.append(repo)

    def build(self, repo: str, options: BuildOptions) -> str:
        self.builds.append((repo, options))
        if self.error is not None:
            raise self.error
        for brand in options.brands:
            target = self.workspace.build_dir(repo, brand)
            target.mkdir(parents=True, exist_ok=True)
            (target / DEPENDENCIES_JSON).write_text(
                json.dumps(
                    {
                        "comment": f"# built for {brand}",
                        repo: {"sha": "b" * 40, "branch": "main"},
                        "chipper": {"sha": "c" * 40, "branch": "main"},
                    },
                    indent=2,
                ),
                encoding="utf-8",
            )
        return self.output


class FakeDevServer:
    """``DevServerClient`` with a set of existing remote directories."""

    def __init__(self, host: str = "dev.example.test") -> None:
        self._host = host
        self.existing: set[str] = set()
        self.commands: list[str] = []
        self.copies: list[tuple[Path, str]] = []

    @property
    def host(self) -> str:
        return self._host

    def directory_exists(self, path: str) -> bool:
        return path in self.existing

    def ssh(self, command: str) -> str:
        self.commands.append(command)
        return ""

    def scp(self, source: Path, destination: str) -> None:
        self.copies.append((source, destination))


class FakeBuildServer:
    def __init__(self) -> None:
        self.requests: list[BuildServerRequest] = []
        self.error: DeployError | None = None

    def request_build(self, request: BuildServerRequest) -> None:
        if self.error is not None:
            raise self.error
        self.requests.append(request)


class ScriptedConfirmer:
    """Answers prompts from a table of substrings; unmatched prompts get ``default``."""

    def __init__(self, answers: dict[str, bool] | None = None, default: bool = True) -> None:
        self.answers = dict(answers or {})
        self.default = default
        self.prompts: list[str] = []

    def __call__(self, prompt: str, noninteractive: bool) -> bool:
        self.prompts.append(prompt)
        if noninteractive:
            return True
        for fragment, answer in self.answers.items():
            if fragment in prompt:
                return answer
        return self.default


class FakeNetwork:
    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable

    def is_reachable(self) -> bool:
        return self.reachable


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def workspace(tmp_dir: Path) -> Workspace:
    """Provide a Workspace rooted in a temp directory."""
    root = tmp_dir / "checkouts"
    root.mkdir()
    return Workspace(root)


@pytest.fixture
def fake_git(workspace: Workspace) -> FakeGit:
    return FakeGit(workspace)


@pytest.fixture
def fake_build(workspace: Workspace) -> FakeBuild:
    return FakeBuild(workspace)


@pytest.fixture
def fake_dev_server() -> FakeDevServer:
    return FakeDevServer()


@pytest.fixture
def fake_build_server() -> FakeBuildServer:
    return FakeBuildServer()


@pytest.fixture
def confirmer() -> ScriptedConfirmer:
    return ScriptedConfirmer()


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def deploy_config(tmp_dir: Path) -> DeployConfig:
    """Provide a DeployConfig pointing at test hosts."""
    return DeployConfig(
        workspace_root=tmp_dir / "checkouts",
        dev_deploy_path="/data/dev/html/",
        dev_site_url="https://dev.example.test/html",
        production_server_url="https://build.example.test",
        production_site_url="https://sims.example.test/html",
        phetio_site_url="https://phetio.example.test/sims",
        build_server_authorization_code="test-auth-code",
        build_server_email="deployer@example.test",
        vpn_check_host="internal.example.test",
    )


@pytest.fixture
def make_repo(workspace: Workspace, fake_git: FakeGit) -> Callable[..., Path]:
    """Factory fixture: write a repo's state files and register its branch."""

    def _factory(
        name: str = REPO,
        version: str = "1.2.0-dev.3",
        *,
        branch: str = "main",
        brands: list[str] | None = None,
        published: bool = True,
        screenshot: bool = True,
        phetio: dict[str, Any] | None = None,
    ) -> Path:
        path = workspace.repo_path(name)
        path.mkdir(parents=True, exist_ok=True)
        phet: dict[str, Any] = {
            "supportedBrands": brands if brands is not None else ["phet", "phet-io"],
            "published": published,
        }
        if phetio is not None:
            phet["phet-io"] = phetio
        workspace.write_package(name, {"name": name, "version": version, "phet": phet})
        (path / DEPENDENCIES_JSON).write_text(
            json.dumps(
                {
                    "comment": "# initial",
                    name: {"sha": "0" * 40, "branch": branch},
                    "chipper": {"sha": "1" * 40, "branch": "main"},
                },
                indent=2,
            ),
            encoding="utf-8",
        )
        if screenshot:
            (path / "assets").mkdir(exist_ok=True)
            workspace.screenshot_path(name).write_bytes(b"\x89PNG")
        fake_git.register_branch(name, branch)
        return path

    return _factory


@pytest.fixture
def release_manager(
    workspace: Workspace, fake_git: FakeGit, fake_build: FakeBuild
) -> ReleaseBranchManager:
    return ReleaseBranchManager(workspace, fake_git, fake_build)


@pytest.fixture
def orchestrator(
    workspace: Workspace,
    fake_git: FakeGit,
    fake_build: FakeBuild,
    fake_dev_server: FakeDevServer,
    fake_build_server: FakeBuildServer,
    confirmer: ScriptedConfirmer,
    network: FakeNetwork,
    deploy_config: DeployConfig,
    release_manager: ReleaseBranchManager,
) -> DeployOrchestrator:
    """Provide a DeployOrchestrator wired to in-memory fakes."""
    return DeployOrchestrator(
        workspace,
        fake_git,
        fake_build,
        fake_dev_server,
        fake_build_server,
        confirmer,
        network,
        config=deploy_config,
        release_manager=release_manager,
    )
