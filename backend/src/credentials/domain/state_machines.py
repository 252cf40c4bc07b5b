"""Resolution state machine for a single identity.

Invariants:
    READY, DECLINED and FAILED are terminal - no transitions out
    PRESENT never passes through PROMPTED: existing material is never regenerated
    GENERATING is only reachable from an explicit operator confirmation
"""

from typing import TYPE_CHECKING

from credentials.domain.state_machine import StateMachine
from credentials.domain.states import IdentityEvent as Event
from credentials.domain.states import IdentityStatus as Status

if TYPE_CHECKING:
    from credentials.domain.models import IdentityResolution

ResolutionTransitions = dict[tuple[Status, Event], Status]


class IdentityResolutionStateMachine(StateMachine[Status, Event]):
    """State machine for IdentityResolution.

    Transition Table:
        (UNCHECKED, MATERIAL_FOUND) -> PRESENT
        (UNCHECKED, MATERIAL_MISSING) -> MISSING
        (PRESENT, KEY_LOADED) -> READY
        (PRESENT, KEY_REJECTED) -> FAILED
        (MISSING, OPERATOR_PROMPTED) -> PROMPTED
        (MISSING, CONFIRMATION_UNAVAILABLE) -> FAILED
        (PROMPTED, OPERATOR_DECLINED) -> DECLINED
        (PROMPTED, OPERATOR_CONFIRMED) -> GENERATING
        (GENERATING, ISSUANCE_COMPLETED) -> READY
        (GENERATING, ISSUANCE_FAILED) -> FAILED
    """

    TRANSITIONS: ResolutionTransitions = {
        (Status.UNCHECKED, Event.MATERIAL_FOUND): Status.PRESENT,
        (Status.UNCHECKED, Event.MATERIAL_MISSING): Status.MISSING,
        (Status.PRESENT, Event.KEY_LOADED): Status.READY,
        (Status.PRESENT, Event.KEY_REJECTED): Status.FAILED,
        (Status.MISSING, Event.OPERATOR_PROMPTED): Status.PROMPTED,
        (Status.MISSING, Event.CONFIRMATION_UNAVAILABLE): Status.FAILED,
        (Status.PROMPTED, Event.OPERATOR_DECLINED): Status.DECLINED,
        (Status.PROMPTED, Event.OPERATOR_CONFIRMED): Status.GENERATING,
        (Status.GENERATING, Event.ISSUANCE_COMPLETED): Status.READY,
        (Status.GENERATING, Event.ISSUANCE_FAILED): Status.FAILED,
        # READY, DECLINED and FAILED are terminal
    }

    TERMINAL_STATES = frozenset({Status.READY, Status.DECLINED, Status.FAILED})

    def __init__(self, resolution: "IdentityResolution"):
        super().__init__(resolution)

    def entity_id(self) -> str:
        return f"{self._record.kind.value}:{self._record.name}"

    @property
    def is_terminal(self) -> bool:
        return self.state in self.TERMINAL_STATES

    def record_check(self, usable: bool) -> Status:
        """Record the result of the on-disk existence check."""
        return self.transition(Event.MATERIAL_FOUND if usable else Event.MATERIAL_MISSING)

    def record_answer(self, confirmed: bool) -> Status:
        """Record the operator's answer to the generation prompt."""
        return self.transition(Event.OPERATOR_CONFIRMED if confirmed else Event.OPERATOR_DECLINED)
