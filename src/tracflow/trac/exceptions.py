"""Custom exceptions for the Trac client."""

from __future__ import annotations


class TracError(Exception):
    """Base exception for Trac client errors."""


class TransportError(TracError):
    """The remote call failed: network, HTTP status, auth, or XML-RPC fault."""

    def __init__(
        self,
        message: str,
        procedure: str | None = None,
        fault_code: int | None = None,
        fault_string: str | None = None,
    ) -> None:
        super().__init__(message)
        self.procedure = procedure
        self.fault_code = fault_code
        self.fault_string = fault_string


class DecodeError(TracError):
    """The response did not have the expected shape."""


class ReviewRequestError(TracError):
    """One or both steps of a review request failed.

    Attributes:
        reviewer_error: Error from setting the reviewer, if it failed.
        action_error: Error from applying the peer_review action, if it failed.
    """

    def __init__(
        self,
        ticket_id: int,
        reviewer_error: TracError | None = None,
        action_error: TracError | None = None,
    ) -> None:
        failed = []
        if reviewer_error is not None:
            failed.append(f"set reviewer ({reviewer_error})")
        if action_error is not None:
            failed.append(f"apply peer_review ({action_error})")
        super().__init__(f"Review request for ticket #{ticket_id} failed: {'; '.join(failed)}")
        self.ticket_id = ticket_id
        self.reviewer_error = reviewer_error
        self.action_error = action_error
