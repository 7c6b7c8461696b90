"""Build bridge — package install, lint and build invocations.

The pipeline never looks inside the build tool.  It runs it, keeps its
output for the log, and inspects the output for a single signal: the
``WARNING404`` marker chipper prints when a phet-io dependency is missing.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from simdeploy.errors import BuildError
from simdeploy.models.release import BuildOptions

logger = logging.getLogger(__name__)

MISSING_PHETIO_DEPENDENCY_MARKER = "WARNING404"


@runtime_checkable
class BuildService(Protocol):
    """Protocol for the build toolchain."""

    def npm_update(self, repo: str) -> None: ...

    def lint(self, repo: str) -> None: ...

    def build(self, repo: str, options: BuildOptions) -> str:
        """Build *repo*; return the tool's combined output."""
        ...


def check_build_output(output: str) -> None:
    """Raise ``BuildError`` if the build output reports a missing phet-io dependency."""
    if MISSING_PHETIO_DEPENDENCY_MARKER in output:
        raise BuildError("phet-io dependencies missing (build output contained WARNING404)")


def build_arguments(options: BuildOptions) -> list[str]:
    """Grunt arguments for *options*."""
    args = [f"--brands={','.join(options.brands)}"]
    if not options.minify:
        args.append("--minify.minify=false")
    if options.all_html:
        args.append("--allHTML")
    if options.debug_html:
        args.append("--debugHTML")
    return args


class SubprocessBuildService:
    """``BuildService`` running npm and grunt as subprocesses.

    Parameters
    ----------
    root:
        Workspace root; commands run in ``root / repo``.
    grunt_command / npm_command:
        Executables to invoke.
    timeout:
        Per-command timeout in seconds.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        grunt_command: str = "grunt",
        npm_command: str = "npm",
        timeout: int = 1800,
    ) -> None:
        self._root = Path(root)
        self._grunt = grunt_command
        self._npm = npm_command
        self._timeout = timeout

    def _run(self, repo: str, command: list[str]) -> str:
        cwd = self._root / repo
        logger.info("Running %s in %s", " ".join(command), cwd)
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as exc:
            raise BuildError(f"{' '.join(command)} could not run in {repo}: {exc}") from exc
        output = result.stdout + result.stderr
        if result.returncode != 0:
            raise BuildError(
                f"{' '.join(command)} failed in {repo} (exit {result.returncode}):\n{output}"
            )
        return output

    def npm_update(self, repo: str) -> None:
        self._run(repo, [self._npm, "prune"])
        self._run(repo, [self._npm, "update"])

    def lint(self, repo: str) -> None:
        self._run(repo, [self._grunt, "lint-all"])

    def build(self, repo: str, options: BuildOptions) -> str:
        output = self._run(repo, [self._grunt, *build_arguments(options)])
        check_build_output(output)
        return output
