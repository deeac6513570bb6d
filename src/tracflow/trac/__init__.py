"""Trac client - tickets, field metadata and workflow actions over XML-RPC."""

from tracflow.trac.actions import WorkflowAction, acceptance_action
from tracflow.trac.connection import Trac
from tracflow.trac.exceptions import (
    DecodeError,
    ReviewRequestError,
    TracError,
    TransportError,
)
from tracflow.trac.fields import list_fields
from tracflow.trac.models import Action, TicketField, TicketFieldType
from tracflow.trac.tickets import Ticket

__all__ = [
    "Action",
    "DecodeError",
    "ReviewRequestError",
    "Ticket",
    "TicketField",
    "TicketFieldType",
    "Trac",
    "TracError",
    "TransportError",
    "WorkflowAction",
    "acceptance_action",
    "list_fields",
]
