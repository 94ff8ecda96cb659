"""Account approval lifecycle.

    PENDING --approve--> APPROVED
    PENDING --reject---> REJECTED

APPROVED and REJECTED are terminal. Applying an action to a terminal state leaves
it unchanged, so repeated admin clicks are harmless no-ops.
"""

from RecitationReportApp.core.choices import ApprovalAction, ApprovalState, UserRole

TRANSITIONS: dict[tuple[ApprovalState, ApprovalAction], ApprovalState] = {
    (ApprovalState.PENDING, ApprovalAction.APPROVE): ApprovalState.APPROVED,
    (ApprovalState.PENDING, ApprovalAction.REJECT): ApprovalState.REJECTED,
}

TERMINAL_STATES = frozenset({ApprovalState.APPROVED, ApprovalState.REJECTED})


def initial_approval_state(role: str) -> ApprovalState:
    """Admins start approved; teachers and students wait for review."""
    return ApprovalState.APPROVED if role == UserRole.ADMIN else ApprovalState.PENDING


def is_terminal(state: str) -> bool:
    return state in TERMINAL_STATES


def transition(state: str, action: str) -> ApprovalState:
    """Return the state reached by applying action; undefined pairs keep the current state."""
    current = ApprovalState(state)
    return TRANSITIONS.get((current, ApprovalAction(action)), current)
