"""Stake status state machine using transitions library.

Two policies are supported:
- "free": any status may move to any other (the default)
- "gtd": completed and cancelled are terminal; only reopen leaves them

Usage:
    from mlw.entities.status_fsm import StatusFSM

    fsm = StatusFSM(stake, policy="gtd")
    fsm.transition_to(StakeStatus.COMPLETED)
"""

import logging

from transitions import Machine, MachineError

from mlw.entities.stake import Stake, StakeStatus
from mlw.errors import InvalidStatusTransition

logger = logging.getLogger(__name__)


STATES = [s.value for s in StakeStatus]

POLICY_FREE = "free"
POLICY_GTD = "gtd"
POLICIES = (POLICY_FREE, POLICY_GTD)

# Explicit transitions for the gtd policy, as (trigger, source, dest)
GTD_TRANSITIONS = [
    {"trigger": "defer", "source": "active", "dest": "deferred"},
    {"trigger": "activate", "source": "deferred", "dest": "active"},

    {"trigger": "complete", "source": "active", "dest": "completed"},
    {"trigger": "complete", "source": "deferred", "dest": "completed"},

    {"trigger": "cancel", "source": "active", "dest": "cancelled"},
    {"trigger": "cancel", "source": "deferred", "dest": "cancelled"},

    # Terminal states only leave through reopen
    {"trigger": "reopen", "source": "completed", "dest": "active"},
    {"trigger": "reopen", "source": "cancelled", "dest": "active"},
]


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name for the gtd policy."""
    lookup: dict[tuple[str, str], str] = {}
    for t in GTD_TRANSITIONS:
        lookup.setdefault((t["source"], t["dest"]), t["trigger"])
    return lookup


GTD_TRIGGER_FOR = _build_trigger_lookup()


def trigger_for(policy: str, source: str, dest: str) -> str | None:
    """Return the trigger moving source -> dest under policy, or None."""
    if policy == POLICY_FREE:
        # auto_transitions adds a to_<state> trigger from every state
        return f"to_{dest}"
    return GTD_TRIGGER_FOR.get((source, dest))


def can_transition(policy: str, from_status: StakeStatus, to_status: StakeStatus) -> bool:
    """Check if a status change is allowed. Self-transitions always are."""
    if from_status is to_status:
        return True
    return trigger_for(policy, from_status.value, to_status.value) is not None


class StatusFSM:
    """State machine driving one stake's status.

    The machine starts in the stake's current status and writes every
    accepted transition back through Stake.set_status().
    """

    def __init__(self, stake: Stake, policy: str = POLICY_FREE):
        if policy not in POLICIES:
            raise ValueError(f"Unknown status policy: {policy!r}")
        self.stake = stake
        self.policy = policy

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=GTD_TRANSITIONS if policy == POLICY_GTD else [],
            initial=stake.status.value,
            auto_transitions=policy == POLICY_FREE,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Callback after any transition: apply the new status to the stake."""
        from_state = event.transition.source
        to_state = event.transition.dest
        logger.debug(f"[FSM] {self.stake.id}: {from_state} -> {to_state} ({event.event.name})")
        self.stake.set_status(StakeStatus(to_state))

    def transition_to(self, to_status: StakeStatus) -> None:
        """Move the stake to to_status.

        Re-setting the current status is accepted and only refreshes
        updated_at.

        Raises:
            InvalidStatusTransition: If the policy forbids the change
        """
        current = self.state
        if current == to_status.value:
            self.stake.set_status(to_status)
            return

        trigger = trigger_for(self.policy, current, to_status.value)
        if trigger is None:
            raise InvalidStatusTransition(self.stake.id, StakeStatus(current), to_status)

        try:
            getattr(self, trigger)()
        except MachineError as e:
            raise InvalidStatusTransition(self.stake.id, StakeStatus(current), to_status) from e

    def get_available_triggers(self) -> list[str]:
        """Get list of triggers available in current state."""
        return self.machine.get_triggers(self.state)
