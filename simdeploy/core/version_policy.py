"""Version policy — which version a deploy may move to.

Pure functions: given the previous ``SimVersion``, the deploy stage and the
run flags, compute the next legal version or raise ``TransitionError``.

Legal transitions
-----------------
dev          ``M.m.p-dev.N``      -> ``M.m.p-dev.N+1``       (branch ``main``)
one-off      ``M.m.p-NAME.N``     -> ``M.m.p-NAME.N+1``      (branch ``NAME``)
rc           ``M.m.p-rc.N``       -> ``M.m.p-rc.N+1``
rc           ``M.m.p``            -> ``M.m.p+1-rc.1``
production   ``M.m.p-rc.N``       -> ``M.m.p``
production   ``M.m.p``            -> ``M.m.p``  (redeploy, noninteractive only)
"""

from __future__ import annotations

from simdeploy.errors import TransitionError
from simdeploy.models.release import VersionProposal
from simdeploy.models.stages import DeployStage
from simdeploy.models.versioning import SimVersion

MAIN_BRANCH = "main"
DEV_TEST_TYPE = "dev"
RC_TEST_TYPE = "rc"


def dev_test_type(branch: str) -> str:
    """Test type a dev deploy uses: ``dev`` on main, else the one-off name."""
    return DEV_TEST_TYPE if branch == MAIN_BRANCH else branch


def check_previous(
    stage: DeployStage,
    previous: SimVersion,
    *,
    branch: str,
    redeploy: bool = False,
    noninteractive: bool = False,
) -> None:
    """Raise ``TransitionError`` if *previous* does not permit *stage*."""
    if stage == DeployStage.DEV:
        expected = dev_test_type(branch)
        if previous.test_type != expected:
            if branch != MAIN_BRANCH:
                number = 0 if previous.test_number is None else previous.test_number
                raise TransitionError(
                    f"The current version identifier {previous} is not a one-off version "
                    f"(should be something like {previous.major}.{previous.minor}."
                    f"{previous.maintenance}-{expected}.{number}), aborting."
                )
            raise TransitionError(
                f"The current version identifier {previous} is not a dev version, aborting."
            )
        return

    if stage == DeployStage.RC:
        if previous.test_type not in (RC_TEST_TYPE, None):
            raise TransitionError(
                "Aborted rc deployment since the version number cannot be incremented "
                f"safely (testType:{previous.test_type})"
            )
        return

    # Production: an already-published version may only be redeployed
    # explicitly and without prompts.
    if previous.test_type is None:
        if not (redeploy and noninteractive):
            raise TransitionError(
                f"Aborted production deployment: the last deployment was a production "
                f"deployment ({previous}) and an RC version is required between production "
                "versions. Use --redeploy with --noninteractive to redeploy it."
            )
        return
    if previous.test_type != RC_TEST_TYPE:
        raise TransitionError(
            "Aborted production deployment since the version number cannot be "
            f"incremented safely (testType:{previous.test_type})"
        )


def next_version(
    stage: DeployStage,
    previous: SimVersion,
    *,
    branch: str,
    redeploy: bool = False,
    noninteractive: bool = False,
) -> VersionProposal:
    """Compute the version *stage* deploys, after validating *previous*."""
    check_previous(
        stage,
        previous,
        branch=branch,
        redeploy=redeploy,
        noninteractive=noninteractive,
    )

    if stage == DeployStage.DEV:
        proposed = SimVersion(
            previous.major,
            previous.minor,
            previous.maintenance,
            test_type=dev_test_type(branch),
            test_number=previous.test_number + 1,
        )
        return VersionProposal(previous=previous, proposed=proposed, changed=True)

    if stage == DeployStage.RC:
        proposed = SimVersion(
            previous.major,
            previous.minor,
            previous.maintenance + (1 if previous.test_type is None else 0),
            test_type=RC_TEST_TYPE,
            test_number=previous.test_number + 1 if previous.test_number else 1,
        )
        return VersionProposal(previous=previous, proposed=proposed, changed=True)

    # Production: the redeploy case is decided before the rc case.
    if previous.test_type is None:
        return VersionProposal(previous=previous, proposed=previous, changed=False)
    proposed = SimVersion(previous.major, previous.minor, previous.maintenance)
    return VersionProposal(previous=previous, proposed=proposed, changed=True)


def release_branch_version(branch: str) -> SimVersion:
    """First version of a freshly cut release branch: ``M.m.0-rc.0``."""
    base = SimVersion.ensure_release_branch(branch)
    return SimVersion(base.major, base.minor, 0, test_type=RC_TEST_TYPE, test_number=0)


def advanced_main_version(branch: str) -> SimVersion:
    """Version main moves to once release branch ``M.m`` is cut: ``M.m+1.0-dev.0``."""
    base = SimVersion.ensure_release_branch(branch)
    return SimVersion(
        base.major, base.minor + 1, 0, test_type=DEV_TEST_TYPE, test_number=0
    )


def one_off_version(current: SimVersion, branch: str) -> SimVersion:
    """First version of a one-off branch, seeded from the current version."""
    return SimVersion(current.major, current.minor, 0, test_type=branch, test_number=0)
