"""Data models for the Trac client."""

from dataclasses import dataclass
from enum import StrEnum


class TicketFieldType(StrEnum):
    """Kind of value a ticket field holds.

    INTEGER and FLOAT are never produced from Trac's type labels today.
    """

    DROP_DOWN = "dropdown"
    STRING = "string"
    INTEGER = "integer"
    TEXT = "text"
    FLOAT = "float"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class TicketField:
    """Schema entry returned by ticket.getTicketFields."""

    name: str
    type: TicketFieldType
    options: list[str] | None = None
    default: str | None = None


@dataclass(frozen=True)
class Action:
    """A workflow action on a ticket.

    ``description`` is only filled in when the action comes from the server.
    """

    name: str
    description: str = ""
