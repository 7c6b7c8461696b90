"""simdeploy data models — Pydantic v2; all frozen except the deploy session."""

from simdeploy.models.release import (
    BuildOptions,
    BuildServerRequest,
    ReleaseBranch,
    VersionProposal,
)
from simdeploy.models.session import DeploySession, DeployTransition
from simdeploy.models.stages import (
    POST_BUILD_CONFIRM_STAGES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    DeployStage,
    DeployState,
)
from simdeploy.models.versioning import SimVersion

__all__ = [
    # versioning
    "SimVersion",
    # stages
    "DeployStage",
    "DeployState",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "POST_BUILD_CONFIRM_STAGES",
    # session
    "DeploySession",
    "DeployTransition",
    # release
    "BuildOptions",
    "BuildServerRequest",
    "ReleaseBranch",
    "VersionProposal",
]
