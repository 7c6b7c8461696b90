"""Git bridge — the narrow git surface the pipeline depends on.

``GitRepository`` is the protocol the orchestrator and the release branch
manager call.  ``GitPythonRepository`` implements it on top of GitPython for
checkouts living under a common workspace root.  Every call takes the repo
name so one instance serves the sim repo and its toolchain siblings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from git import Repo
from git.exc import GitCommandError

from simdeploy.errors import GitOperationError

logger = logging.getLogger(__name__)


@runtime_checkable
class GitRepository(Protocol):
    """Protocol for the git operations used by the pipeline."""

    def is_clean(self, repo: str) -> bool: ...

    def current_branch(self, repo: str) -> str | None:
        """Checked-out branch name, or ``None`` for a detached HEAD."""
        ...

    def checkout(self, repo: str, branch: str) -> None: ...

    def create_branch(self, repo: str, branch: str) -> None:
        """Create *branch* from the current HEAD and check it out."""
        ...

    def has_remote_branch(self, repo: str, branch: str) -> bool: ...

    def head_sha(self, repo: str) -> str: ...

    def remote_branch_sha(self, repo: str, branch: str) -> str | None: ...

    def commit(self, repo: str, message: str, paths: list[str]) -> None:
        """Stage *paths* (relative to the repo) and commit them."""
        ...

    def push(self, repo: str, branch: str) -> None: ...


class GitPythonRepository:
    """``GitRepository`` backed by GitPython.

    Parameters
    ----------
    root:
        Workspace root; repo ``name`` lives at ``root / name``.
    remote:
        Remote name used for pushes and remote-branch lookups.
    """

    def __init__(self, root: Path | str, remote: str = "origin") -> None:
        self._root = Path(root)
        self._remote = remote
        self._repos: dict[str, Repo] = {}

    def _repo(self, repo: str) -> Repo:
        if repo not in self._repos:
            self._repos[repo] = Repo(self._root / repo)
        return self._repos[repo]

    def _git(self, repo: str, *args: str) -> str:
        try:
            return self._repo(repo).git.execute(["git", *args])
        except GitCommandError as exc:
            raise GitOperationError(
                f"git {' '.join(args)} failed in {repo}: {exc.stderr.strip() or exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_clean(self, repo: str) -> bool:
        return not self._repo(repo).is_dirty(untracked_files=True)

    def current_branch(self, repo: str) -> str | None:
        try:
            return self._repo(repo).active_branch.name
        except TypeError:
            # Detached HEAD
            return None

    def has_remote_branch(self, repo: str, branch: str) -> bool:
        return self.remote_branch_sha(repo, branch) is not None

    def head_sha(self, repo: str) -> str:
        return self._repo(repo).head.commit.hexsha

    def remote_branch_sha(self, repo: str, branch: str) -> str | None:
        output = self._git(repo, "ls-remote", "--heads", self._remote, branch)
        for line in output.splitlines():
            sha, _, ref = line.partition("\t")
            if ref == f"refs/heads/{branch}":
                return sha
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def checkout(self, repo: str, branch: str) -> None:
        logger.info("git checkout %s in %s", branch, repo)
        self._git(repo, "checkout", branch)

    def create_branch(self, repo: str, branch: str) -> None:
        logger.info("git checkout -b %s in %s", branch, repo)
        self._git(repo, "checkout", "-b", branch)

    def commit(self, repo: str, message: str, paths: list[str]) -> None:
        self._git(repo, "add", *paths)
        self._git(repo, "commit", "--no-verify", "-m", message)
        logger.info("Committed in %s: %s", repo, message.splitlines()[0])

    def push(self, repo: str, branch: str) -> None:
        logger.info("git push %s %s in %s", self._remote, branch, repo)
        self._git(repo, "push", "-u", self._remote, branch)
