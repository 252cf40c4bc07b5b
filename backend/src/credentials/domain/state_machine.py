"""Transition-table base for resolution records.

A record is any object with a mutable ``status`` attribute. Subclasses
declare TRANSITIONS mapping (status, event) to the next status; anything
not in the table is rejected.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from opentelemetry import metrics

logger = logging.getLogger(__name__)

meter = metrics.get_meter("credentials.state_machines")

state_transitions_total = meter.create_counter(
    name="credentials_state_transitions_total",
    description="Total identity resolution state transitions",
    unit="1",
)


class InvalidTransitionError(Exception):
    """Raised when a record cannot handle an event in its current status."""

    def __init__(self, entity_id: str, current_state: str, event: str):
        self.entity_id = entity_id
        self.current_state = current_state
        self.event = event
        super().__init__(f"{entity_id}: event {event} is not allowed in state {current_state}")


S = TypeVar("S", bound=Enum)
E = TypeVar("E", bound=Enum)


class StateMachine(ABC, Generic[S, E]):
    TRANSITIONS: ClassVar[dict[tuple[Any, Any], Any]]

    def __init__(self, record: Any) -> None:
        self._record = record

    @property
    def state(self) -> S:
        return self._record.status

    @abstractmethod
    def entity_id(self) -> str: ...

    def allowed_events(self) -> list[E]:
        return [event for state, event in self.TRANSITIONS if state == self.state]

    def transition(self, event: E) -> S:
        """Move the record to the next status for ``event``.

        Raises:
            InvalidTransitionError: If (status, event) is not in TRANSITIONS.
        """
        current = self.state
        new_state = self.TRANSITIONS.get((current, event))
        if new_state is None:
            logger.warning(
                "invalid_transition_attempted",
                extra={"entity_id": self.entity_id(), "state": current.value, "event": event.value},
            )
            raise InvalidTransitionError(self.entity_id(), current.value, event.value)

        self._record.status = new_state
        logger.debug(
            "state_transition",
            extra={
                "entity_id": self.entity_id(),
                "from_state": current.value,
                "to_state": new_state.value,
                "event": event.value,
            },
        )
        state_transitions_total.add(
            1,
            {
                "machine": type(self).__name__,
                "from_state": current.value,
                "to_state": new_state.value,
            },
        )
        return new_state
