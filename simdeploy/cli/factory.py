"""Wires the concrete bridge adapters from a ``DeployConfig``."""

from __future__ import annotations

from rich.console import Console

from simdeploy.bridge.build import SubprocessBuildService
from simdeploy.bridge.build_server import HttpBuildServerClient
from simdeploy.bridge.confirm import TerminalConfirmer
from simdeploy.bridge.dev_server import SshDevServer
from simdeploy.bridge.git import GitPythonRepository
from simdeploy.bridge.network import DnsNetworkCheck
from simdeploy.config import DeployConfig
from simdeploy.core.orchestrator import DeployOrchestrator
from simdeploy.core.release_branch import ReleaseBranchManager
from simdeploy.core.workspace import Workspace


def build_release_manager(config: DeployConfig) -> ReleaseBranchManager:
    root = config.workspace_root
    return ReleaseBranchManager(
        Workspace(root),
        GitPythonRepository(root),
        SubprocessBuildService(
            root,
            grunt_command=config.grunt_command,
            npm_command=config.npm_command,
            timeout=config.command_timeout_seconds,
        ),
        toolchain_repos=config.toolchain_repos,
    )


def build_orchestrator(config: DeployConfig, console: Console | None = None) -> DeployOrchestrator:
    root = config.workspace_root
    workspace = Workspace(root)
    git = GitPythonRepository(root)
    build = SubprocessBuildService(
        root,
        grunt_command=config.grunt_command,
        npm_command=config.npm_command,
        timeout=config.command_timeout_seconds,
    )
    return DeployOrchestrator(
        workspace,
        git,
        build,
        SshDevServer(
            config.dev_deploy_server,
            config.dev_deploy_user,
            timeout=config.command_timeout_seconds,
        ),
        HttpBuildServerClient(
            config.production_server_url, timeout=config.request_timeout_seconds
        ),
        TerminalConfirmer(console),
        DnsNetworkCheck(config.vpn_check_host),
        config=config,
        release_manager=ReleaseBranchManager(
            workspace, git, build, toolchain_repos=config.toolchain_repos
        ),
    )
