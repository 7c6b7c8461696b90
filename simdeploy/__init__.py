"""simdeploy: release-version lifecycle and deployment pipeline for simulation repos.

  - ``SimVersion`` value type with parse/format, ordering and branch helpers
  - Version policy for dev, one-off, rc and production transitions
  - Release and one-off branch creation
  - Deploy orchestrator: explicit state machine with rollback to ``main``
  - Typer CLI (``simdeploy deploy dev|rc|production``, ``create-release``, ...)
"""

__version__ = "0.1.0"
__description__ = "Release-version lifecycle and deployment pipeline for simulation repos"

from simdeploy.core.orchestrator import DeployOrchestrator
from simdeploy.core.release_branch import ReleaseBranchManager
from simdeploy.models.versioning import SimVersion

__all__ = ["DeployOrchestrator", "ReleaseBranchManager", "SimVersion", "__version__"]
