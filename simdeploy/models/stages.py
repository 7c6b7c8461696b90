"""Deploy stages and the pipeline state machine table."""

from __future__ import annotations

from enum import Enum


class DeployStage(str, Enum):
    """Deployment target of a pipeline run."""

    DEV = "dev"
    RC = "rc"
    PRODUCTION = "production"


class DeployState(str, Enum):
    """States of a single pipeline run, in forward order."""

    PRECHECK = "precheck"
    VERSION_COMPUTE = "version_compute"
    CONFIRM = "confirm"
    VERSION_COMMIT = "version_commit"
    DEPENDENCY_INSTALL = "dependency_install"
    BUILD = "build"
    POST_BUILD_CONFIRM = "post_build_confirm"
    PUBLISH = "publish"
    DONE = "done"
    # Rollback edges
    ROLLBACK_VERSION = "rollback_version"
    CHECKOUT_MAIN = "checkout_main"
    FAIL = "fail"


TERMINAL_STATES: frozenset[DeployState] = frozenset({DeployState.DONE, DeployState.FAIL})

# Valid state transitions, enforced structurally by DeployMachine.
# Every non-terminal state may fall to CHECKOUT_MAIN on an unhandled error.
# BUILD -> PUBLISH is the dev path, which has no post-build gate.
VALID_TRANSITIONS: dict[DeployState, set[DeployState]] = {
    DeployState.PRECHECK: {DeployState.VERSION_COMPUTE, DeployState.CHECKOUT_MAIN},
    DeployState.VERSION_COMPUTE: {DeployState.CONFIRM, DeployState.CHECKOUT_MAIN},
    DeployState.CONFIRM: {DeployState.VERSION_COMMIT, DeployState.CHECKOUT_MAIN},
    DeployState.VERSION_COMMIT: {DeployState.DEPENDENCY_INSTALL, DeployState.CHECKOUT_MAIN},
    DeployState.DEPENDENCY_INSTALL: {DeployState.BUILD, DeployState.CHECKOUT_MAIN},
    DeployState.BUILD: {
        DeployState.POST_BUILD_CONFIRM,
        DeployState.PUBLISH,
        DeployState.CHECKOUT_MAIN,
    },
    DeployState.POST_BUILD_CONFIRM: {
        DeployState.PUBLISH,
        DeployState.ROLLBACK_VERSION,
        DeployState.CHECKOUT_MAIN,
    },
    DeployState.PUBLISH: {DeployState.DONE, DeployState.CHECKOUT_MAIN},
    DeployState.ROLLBACK_VERSION: {DeployState.FAIL, DeployState.CHECKOUT_MAIN},
    DeployState.CHECKOUT_MAIN: {DeployState.FAIL},
    DeployState.DONE: set(),  # terminal
    DeployState.FAIL: set(),  # terminal
}

# Stages that get a second confirmation once the build artifact exists.
POST_BUILD_CONFIRM_STAGES: frozenset[DeployStage] = frozenset(
    {DeployStage.RC, DeployStage.PRODUCTION}
)
