"""Ticket snapshots and the team's workflow transitions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tracflow.trac.actions import WorkflowAction, acceptance_action
from tracflow.trac.exceptions import DecodeError, ReviewRequestError, TracError
from tracflow.trac.models import Action
from tracflow.trac.values import as_array, as_int, as_string, as_struct, lookup_or_empty

if TYPE_CHECKING:
    from tracflow.trac.connection import Trac

logger = logging.getLogger("tracflow.trac")

# Attributes decoded from the ticket.get attribute struct
TRACKED_ATTRIBUTES = (
    "summary",
    "description",
    "component",
    "owner",
    "reporter",
    "tester",
    "priority",
    "milestone",
    "status",
    "reviewer",
    "resolution",
)

DETAIL_RULE = "=" * 56


@dataclass(frozen=True)
class Ticket:
    """Point-in-time snapshot of a Trac ticket.

    Workflow methods push changes to the server and never modify the
    snapshot; fetch the ticket again to see the result.
    """

    id: int
    summary: str = ""
    description: str = ""
    component: str = ""
    owner: str = ""
    reporter: str = ""
    tester: str = ""
    priority: str = ""
    milestone: str = ""
    status: str = ""
    reviewer: str = ""
    resolution: str = ""

    @classmethod
    def from_rpc(cls, result: Any) -> Ticket:
        """Decode a ticket.get response: [id, created, changed, attributes].

        Raises:
            DecodeError: If the id is missing or not an int, or the
                attributes are not a struct of strings.
        """
        response = as_array(result, context="ticket.get")
        if len(response) < 4:
            raise DecodeError(f"Expected 4 entries from ticket.get, got {len(response)}")

        attributes = as_struct(response[3], context="ticket attributes")
        return cls(
            id=as_int(response[0], context="ticket id"),
            **{name: lookup_or_empty(attributes, name) for name in TRACKED_ATTRIBUTES},
        )

    @classmethod
    def get(cls, ticket_id: int, trac: Trac) -> Ticket:
        """Fetch a ticket from the server.

        Raises:
            TransportError: If the call fails.
            DecodeError: If the response has the wrong shape.
        """
        logger.debug("Fetching ticket #%s", ticket_id)
        return cls.from_rpc(trac.call("ticket.get", ticket_id))

    def actions(self, trac: Trac) -> list[Action]:
        """List the workflow actions the server offers for this ticket.

        Best effort: any failure is logged and yields an empty list.
        """
        try:
            result = trac.call("ticket.getActions", self.id)
            actions = []
            for item in as_array(result, context="ticket.getActions"):
                entry = as_array(item, context="action")
                if len(entry) < 2:
                    raise DecodeError(f"Expected action name and label, got {len(entry)} values")
                actions.append(
                    Action(
                        name=as_string(entry[0], context="action name"),
                        description=as_string(entry[1], context="action label"),
                    )
                )
        except TracError as e:
            logger.warning("Could not list actions for ticket #%s: %s", self.id, e)
            return []
        return actions

    def url(self, trac: Trac) -> str:
        """Browser URL of this ticket."""
        return trac.ticket_url(self.id)

    def modify_attributes(
        self, trac: Trac, attributes: Mapping[str, str], comment: str | None = None
    ) -> None:
        """Send attribute changes with an optional comment via ticket.update.

        Raises:
            TransportError: If the update is not confirmed by the server.
        """
        changes = {key: str(value) for key, value in attributes.items()}
        logger.info("Updating ticket #%s: %s", self.id, changes)
        trac.call("ticket.update", self.id, comment or "", changes)

    def apply_action(
        self, trac: Trac, action: Action | WorkflowAction, comment: str | None = None
    ) -> None:
        """Run a workflow action on the ticket."""
        if isinstance(action, WorkflowAction):
            action = action.to_action()
        self.modify_attributes(trac, {"action": action.name}, comment)

    def set_reviewer(self, trac: Trac, reviewer: str) -> None:
        """Set the reviewer field without changing the workflow state."""
        self.modify_attributes(trac, {"reviewer": reviewer})

    def request_review(self, trac: Trac, reviewer: str) -> None:
        """Assign a reviewer and send the ticket to peer review.

        Two updates are sent in order. The peer_review action is attempted
        even when setting the reviewer failed.

        Raises:
            ReviewRequestError: If either update failed. ``reviewer_error``
                and ``action_error`` tell which.
        """
        reviewer_error: TracError | None = None
        action_error: TracError | None = None

        try:
            self.set_reviewer(trac, reviewer)
        except TracError as e:
            reviewer_error = e

        try:
            self.apply_action(
                trac, WorkflowAction.PEER_REVIEW, f"Sent to {reviewer} for review"
            )
        except TracError as e:
            action_error = e

        if reviewer_error is not None or action_error is not None:
            raise ReviewRequestError(self.id, reviewer_error, action_error)

    def review_fail(self, trac: Trac, reason: str) -> None:
        """Reject the change under review, explaining why."""
        self.apply_action(trac, WorkflowAction.REJECT, reason)

    def review_pass(self, trac: Trac, comment: str | None = None) -> None:
        self.apply_action(trac, WorkflowAction.PASS_PEER_REVIEW, comment)

    def release(self, trac: Trac, comment: str | None = None) -> None:
        """Give the ticket up so someone else can take it."""
        self.apply_action(trac, WorkflowAction.LEAVE, comment)

    def accept(self, trac: Trac, estimate_needed: bool, comment: str | None = None) -> None:
        """Take ownership of the ticket.

        Args:
            trac: Server to update.
            estimate_needed: False skips the estimation step
                (no_estimate_needed instead of accept).
            comment: Optional comment.
        """
        self.apply_action(trac, acceptance_action(estimate_needed), comment)

    def reopen(self, trac: Trac, comment: str | None = None) -> None:
        self.apply_action(trac, WorkflowAction.REOPEN, comment)

    def close(self, trac: Trac, comment: str | None = None) -> None:
        self.apply_action(trac, WorkflowAction.RESOLVE, comment)

    def format_terse(self) -> str:
        """One-line summary: id, summary, owner, reviewer, milestone, status."""
        return (
            f"Ticket {self.id}: '{self.summary}' | o: {self.owner}, "
            f"r: {self.reviewer}, m: {self.milestone} | {self.status}"
        )

    def format_detail(self) -> str:
        """Terse line followed by a rule and the description."""
        return f"{self.format_terse()}\n{DETAIL_RULE}\n\n{self.description}"
