"""Dev server bridge — ssh/scp access to the dev deployment host."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from simdeploy.errors import NetworkError

logger = logging.getLogger(__name__)


@runtime_checkable
class DevServerClient(Protocol):
    """Protocol for the dev server."""

    @property
    def host(self) -> str: ...

    def directory_exists(self, path: str) -> bool: ...

    def ssh(self, command: str) -> str: ...

    def scp(self, source: Path, destination: str) -> None:
        """Recursively copy local *source* into remote *destination*."""
        ...


class SshDevServer:
    """``DevServerClient`` shelling out to ``ssh`` and ``scp``.

    Parameters
    ----------
    host:
        Dev server hostname.
    user:
        Remote username; the local default is used when empty.
    timeout:
        Per-command timeout in seconds.
    """

    def __init__(self, host: str, user: str = "", *, timeout: int = 600) -> None:
        self._host = host
        self._user = user
        self._timeout = timeout

    @property
    def host(self) -> str:
        return self._host

    @property
    def _target(self) -> str:
        return f"{self._user}@{self._host}" if self._user else self._host

    def _run(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("Running %s", " ".join(command))
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as exc:
            raise NetworkError(f"Could not reach dev server {self._host}: {exc}") from exc

    def directory_exists(self, path: str) -> bool:
        result = self._run(["ssh", self._target, f"test -d {shlex.quote(path)}"])
        return result.returncode == 0

    def ssh(self, command: str) -> str:
        logger.info("ssh %s: %s", self._host, command)
        result = self._run(["ssh", self._target, command])
        if result.returncode != 0:
            raise NetworkError(
                f"ssh command failed on {self._host} (exit {result.returncode}): "
                f"{command}\n{result.stderr}"
            )
        return result.stdout

    def scp(self, source: Path, destination: str) -> None:
        logger.info("scp %s -> %s:%s", source, self._host, destination)
        result = self._run(["scp", "-r", str(source), f"{self._target}:{destination}"])
        if result.returncode != 0:
            raise NetworkError(
                f"scp to {self._host} failed (exit {result.returncode}): {result.stderr}"
            )
