"""Workflow action identifiers understood by the team's Trac workflow."""

from enum import StrEnum

from tracflow.trac.models import Action


class WorkflowAction(StrEnum):
    """Literal action names sent as the ``action`` attribute of ticket.update."""

    PEER_REVIEW = "peer_review"
    REJECT = "reject"
    PASS_PEER_REVIEW = "pass_peer_review"
    LEAVE = "leave"
    ACCEPT = "accept"
    NO_ESTIMATE_NEEDED = "no_estimate_needed"
    REOPEN = "reopen"
    RESOLVE = "resolve"

    def to_action(self) -> Action:
        """Build a locally-constructed Action with an empty description."""
        return Action(name=self.value)


def acceptance_action(estimate_needed: bool) -> WorkflowAction:
    """Pick the accept variant depending on whether the work needs an estimate."""
    return WorkflowAction.ACCEPT if estimate_needed else WorkflowAction.NO_ESTIMATE_NEEDED
