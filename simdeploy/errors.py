"""Error taxonomy for the deployment pipeline.

Every failure the pipeline can raise derives from ``DeployError``.  All of
them are fail-fast: the orchestrator stops at the first one, runs its
single compensating action (return to ``main``) and re-raises.
"""

from __future__ import annotations

from typing import Any


class DeployError(RuntimeError):
    """Base class for all pipeline errors.

    ``session`` is attached by the orchestrator when the error escapes a
    pipeline run, so callers can inspect the state history.
    """

    def __init__(self, message: str, *, session: Any = None) -> None:
        super().__init__(message)
        self.session = session


class ValidationError(DeployError, ValueError):
    """Raised for a malformed version, branch name or version field."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ParseError(ValidationError):
    """Raised when a version string does not match the version grammar."""


class PreconditionError(DeployError):
    """Raised when the environment does not allow the requested operation.

    Dirty working tree, wrong branch, missing or existing remote branch,
    unreachable network, missing asset, existing dev directory.
    """


class TransitionError(DeployError):
    """Raised when the current test type does not permit the stage's advance."""


class AbortedDeploymentError(DeployError):
    """Raised when the user declines a confirmation gate."""


class NetworkError(DeployError):
    """Raised when the build-server request fails or is rejected."""


class BuildError(DeployError):
    """Raised when the build fails or its output signals a missing dependency."""


class GitOperationError(DeployError):
    """Raised when a git command fails."""
