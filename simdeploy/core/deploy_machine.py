"""Deploy pipeline state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- No transition out of a terminal state
- Every transition recorded in the session history
"""

from __future__ import annotations

import logging

from simdeploy.errors import DeployError
from simdeploy.models.session import DeploySession, DeployTransition
from simdeploy.models.stages import TERMINAL_STATES, VALID_TRANSITIONS, DeployState

logger = logging.getLogger(__name__)


class InvalidTransitionError(DeployError):
    """Raised when a requested state transition is not valid."""


class DeployMachine:
    """Drives one ``DeploySession`` through the pipeline states.

    Parameters
    ----------
    session:
        The session to advance.  Its ``state`` and ``history`` are updated
        in place on every accepted transition.
    """

    def __init__(self, session: DeploySession) -> None:
        self._session = session

    @property
    def session(self) -> DeploySession:
        return self._session

    @property
    def state(self) -> DeployState:
        return self._session.state

    @property
    def is_terminal(self) -> bool:
        return self._session.state in TERMINAL_STATES

    def available_transitions(self) -> set[DeployState]:
        return set(VALID_TRANSITIONS.get(self._session.state, set()))

    def can_transition(self, target: DeployState) -> bool:
        return target in self.available_transitions()

    def transition(self, target: DeployState, note: str = "") -> DeployTransition:
        """Move the session to *target* and record the move.

        Raises ``InvalidTransitionError`` if *target* is not reachable from
        the current state.
        """
        current = self._session.state
        allowed = VALID_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {self._session.session_id} from {current.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )

        record = DeployTransition(from_state=current, to_state=target, note=note)
        self._session.history = [*self._session.history, record]
        self._session.state = target
        logger.debug(
            "%s: %s -> %s%s",
            self._session.session_id,
            current.value,
            target.value,
            f" ({note})" if note else "",
        )
        return record
