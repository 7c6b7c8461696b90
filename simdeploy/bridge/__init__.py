"""Bridge layer between the deploy pipeline and the outside world.

Each module defines a ``typing.Protocol`` the core depends on, plus one
concrete adapter.  Tests substitute in-memory fakes for every protocol.

Modules
-------
git
    ``GitRepository`` — cleanliness, branches, commits, pushes (GitPython).
build
    ``BuildService`` — npm install, lint and grunt build (subprocess).
dev_server
    ``DevServerClient`` — ssh/scp to the dev deployment host (subprocess).
build_server
    ``ProductionServerClient`` — the build-server deploy request (httpx).
network
    ``NetworkCheck`` — internal-network reachability (DNS lookup).
confirm
    ``Confirmer`` — yes/no gates (rich prompt).
"""

from simdeploy.bridge.build import BuildService, SubprocessBuildService
from simdeploy.bridge.build_server import HttpBuildServerClient, ProductionServerClient
from simdeploy.bridge.confirm import Confirmer, TerminalConfirmer
from simdeploy.bridge.dev_server import DevServerClient, SshDevServer
from simdeploy.bridge.git import GitPythonRepository, GitRepository
from simdeploy.bridge.network import DnsNetworkCheck, NetworkCheck

__all__ = [
    "BuildService",
    "SubprocessBuildService",
    "ProductionServerClient",
    "HttpBuildServerClient",
    "Confirmer",
    "TerminalConfirmer",
    "DevServerClient",
    "SshDevServer",
    "GitRepository",
    "GitPythonRepository",
    "NetworkCheck",
    "DnsNetworkCheck",
]
