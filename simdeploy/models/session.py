"""Per-invocation deploy session.

A ``DeploySession`` lives for exactly one pipeline run.  It is the only
mutable model in the package: the orchestrator fills in versions and
appends transitions as the run advances.  It is never persisted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from simdeploy.models.stages import DeployStage, DeployState
from simdeploy.models.versioning import SimVersion


class DeployTransition(BaseModel):
    """Records a single state transition of a pipeline run."""

    model_config = ConfigDict(frozen=True)

    from_state: DeployState
    to_state: DeployState
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    note: str = ""


class DeploySession(BaseModel):
    """State carried through one deploy pipeline run."""

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = Field(
        default_factory=lambda: f"deploy-{uuid.uuid4().hex[:8]}"
    )
    repo: str
    stage: DeployStage
    branch: str
    brands: list[str]
    noninteractive: bool = False
    redeploy: bool = False
    message: str | None = None

    previous_version: SimVersion | None = None
    proposed_version: SimVersion | None = None
    version_changed: bool = False
    published: bool = False  # package.json phet.published at precheck time

    state: DeployState = DeployState.PRECHECK
    history: list[DeployTransition] = []
    deployed_urls: list[str] = []
    error: str | None = None

    @property
    def is_one_off(self) -> bool:
        return self.stage == DeployStage.DEV and self.branch != "main"

    @property
    def version_string(self) -> str:
        return str(self.proposed_version) if self.proposed_version else ""

    @property
    def states_visited(self) -> list[DeployState]:
        """Every state entered during the run, starting with PRECHECK."""
        return [DeployState.PRECHECK] + [t.to_state for t in self.history]
