"""Ticket field metadata read from ticket.getTicketFields."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tracflow.trac.models import TicketField, TicketFieldType
from tracflow.trac.values import as_array, optional_string, optional_string_list

if TYPE_CHECKING:
    from tracflow.trac.connection import Trac

logger = logging.getLogger("tracflow.trac")

# Trac type label -> field type. Labels not listed here are skipped.
FIELD_TYPE_LABELS = {
    "text": TicketFieldType.STRING,
    "textarea": TicketFieldType.TEXT,
    "select": TicketFieldType.DROP_DOWN,
    "radio": TicketFieldType.DROP_DOWN,
    "checkbox": TicketFieldType.BOOLEAN,
}


def decode_fields(result: Any) -> list[TicketField]:
    """Decode a ticket.getTicketFields response.

    Entries that are not structs, lack a string ``name`` or ``type``, or
    carry an unrecognized type are skipped. A non-string entry inside an
    ``options`` array is fatal.

    Raises:
        DecodeError: If the response is not an array or an options list
            holds a non-string.
    """
    fields: list[TicketField] = []
    for entry in as_array(result, context="ticket.getTicketFields"):
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        type_label = entry.get("type")
        if not isinstance(name, str) or not isinstance(type_label, str):
            continue

        field_type = FIELD_TYPE_LABELS.get(type_label)
        if field_type is None:
            logger.debug("Skipping field %s with unsupported type %r", name, type_label)
            continue

        fields.append(
            TicketField(
                name=name,
                type=field_type,
                options=optional_string_list(entry, "options"),
                default=optional_string(entry, "default"),
            )
        )
    return fields


def list_fields(trac: Trac) -> list[TicketField]:
    """Fetch and decode the ticket field schema.

    Raises:
        TransportError: If the call fails.
        DecodeError: If the response has the wrong shape.
    """
    fields = decode_fields(trac.call("ticket.getTicketFields"))
    logger.debug("Decoded %d ticket field(s)", len(fields))
    return fields
