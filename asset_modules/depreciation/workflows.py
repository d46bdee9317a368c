"""
Depreciation Workflows.

State machine for an asset's depreciation lifecycle:

    active --complete_depreciation--> fully_depreciated

The single transition is guarded by ``book_value <= salvage_value``.
``fully_depreciated`` is terminal; no further entries are written.
"""

from dataclasses import dataclass
from decimal import Decimal

from asset_kernel.logging_config import get_logger
from asset_modules.depreciation.models import DepreciationState

logger = get_logger("modules.depreciation.workflows")


@dataclass(frozen=True)
class Guard:
    """A condition for a transition."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition."""
    from_state: DepreciationState
    to_state: DepreciationState
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""
    name: str
    description: str
    initial_state: DepreciationState
    states: tuple[DepreciationState, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[DepreciationState, ...] = ()

    def transition_for(self, from_state: DepreciationState, action: str) -> Transition | None:
        for transition in self.transitions:
            if transition.from_state == from_state and transition.action == action:
                return transition
        return None


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

SALVAGE_VALUE_REACHED = Guard(
    name="salvage_value_reached",
    description="Book value is at or below salvage value",
)


def salvage_value_reached(book_value: Decimal, salvage_value: Decimal) -> bool:
    """Evaluate SALVAGE_VALUE_REACHED."""
    return book_value <= salvage_value


# -----------------------------------------------------------------------------
# Depreciation Workflow
# -----------------------------------------------------------------------------

COMPLETE_DEPRECIATION = "complete_depreciation"

DEPRECIATION_WORKFLOW = Workflow(
    name="asset_depreciation",
    description="Asset depreciation lifecycle",
    initial_state=DepreciationState.ACTIVE,
    states=(DepreciationState.ACTIVE, DepreciationState.FULLY_DEPRECIATED),
    transitions=(
        Transition(
            DepreciationState.ACTIVE,
            DepreciationState.FULLY_DEPRECIATED,
            action=COMPLETE_DEPRECIATION,
            guard=SALVAGE_VALUE_REACHED,
        ),
    ),
    terminal_states=(DepreciationState.FULLY_DEPRECIATED,),
)


def next_state(
    current: DepreciationState,
    book_value: Decimal,
    salvage_value: Decimal,
) -> DepreciationState:
    """
    Resolve the state after a book-value change.

    Fires ``complete_depreciation`` when its guard holds; otherwise the
    state is unchanged.  Terminal states never move.
    """
    if current in DEPRECIATION_WORKFLOW.terminal_states:
        return current
    transition = DEPRECIATION_WORKFLOW.transition_for(current, COMPLETE_DEPRECIATION)
    if transition is not None and salvage_value_reached(book_value, salvage_value):
        logger.info(
            "depreciation_state_transition",
            extra={
                "action": transition.action,
                "from_state": transition.from_state.value,
                "to_state": transition.to_state.value,
                "guard": transition.guard.name if transition.guard else None,
            },
        )
        return transition.to_state
    return current
