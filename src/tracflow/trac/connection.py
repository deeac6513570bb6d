"""Trac - authenticated XML-RPC access to one Trac server."""

from __future__ import annotations

import logging
import xmlrpc.client
from typing import Any
from xml.parsers.expat import ExpatError

import httpx

from tracflow.config import TracConfig
from tracflow.logging import sanitize_for_log, truncate_output
from tracflow.trac.exceptions import TransportError
from tracflow.trac.fields import list_fields
from tracflow.trac.models import TicketField
from tracflow.trac.tickets import Ticket

logger = logging.getLogger("tracflow.trac")

SCHEME = "https"
RPC_PATH = "login/xmlrpc"


class Trac:
    """Client for the Trac XML-RPC plugin.

    Every call builds its own HTTP client with basic authentication and
    closes it when the call returns; nothing is pooled between calls.
    """

    def __init__(
        self,
        config: TracConfig,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            config: Host, base path and credentials.
            transport: httpx transport to send requests through (for testing).
            timeout: Per-request timeout in seconds.
        """
        self.config = config
        self._transport = transport
        self.timeout = timeout

    def url(self) -> str:
        """Base URL of the Trac environment."""
        return f"{SCHEME}://{self.config.host}{self.config.path}"

    @property
    def endpoint_url(self) -> str:
        """URL of the authenticated XML-RPC endpoint."""
        return f"{self.url()}{RPC_PATH}"

    def ticket_url(self, ticket_id: int) -> str:
        """Browser URL of a ticket."""
        return f"{self.url()}ticket/{ticket_id}"

    def _client(self) -> httpx.Client:
        """Create a fresh HTTP client for a single call."""
        return httpx.Client(
            auth=httpx.BasicAuth(self.config.username, self.config.password),
            headers={"Content-Type": "text/xml"},
            timeout=self.timeout,
            transport=self._transport,
        )

    def call(self, procedure: str, *args: Any) -> Any:
        """Invoke a remote procedure and return its decoded result.

        Args:
            procedure: XML-RPC method name, e.g. "ticket.get".
            *args: Positional parameters for the method.

        Returns:
            The untyped value produced by xmlrpc.client.loads.

        Raises:
            TransportError: On arguments XML-RPC cannot carry (e.g. ints
                beyond 32 bits), network failure, a non-200 response, an
                XML-RPC fault, or a response that is not valid XML-RPC.
        """
        try:
            payload = xmlrpc.client.dumps(args, methodname=procedure, encoding="utf-8")
        except (OverflowError, TypeError) as e:
            logger.error("%s arguments cannot be marshaled: %s", procedure, e)
            raise TransportError(
                f"{procedure} arguments cannot be marshaled: {e}", procedure
            ) from e

        logger.debug("Calling %s%r", procedure, args)

        try:
            with self._client() as client:
                response = client.post(self.endpoint_url, content=payload.encode("utf-8"))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = sanitize_for_log(str(e))
            logger.error("%s request failed: %s", procedure, message)
            raise TransportError(f"{procedure} request failed: {message}", procedure) from e

        if response.status_code != 200:
            logger.error(
                "%s returned HTTP %d: %s",
                procedure,
                response.status_code,
                truncate_output(sanitize_for_log(response.text), 500),
            )
            raise TransportError(
                f"{procedure} request failed: HTTP {response.status_code}", procedure
            )

        try:
            params, _ = xmlrpc.client.loads(response.content)
        except xmlrpc.client.Fault as e:
            logger.error("%s fault %s: %s", procedure, e.faultCode, e.faultString)
            raise TransportError(
                f"{procedure} fault {e.faultCode}: {e.faultString}",
                procedure,
                fault_code=e.faultCode,
                fault_string=e.faultString,
            ) from e
        except (xmlrpc.client.Error, ExpatError, ValueError) as e:
            logger.error("%s returned malformed XML-RPC: %s", procedure, e)
            raise TransportError(f"{procedure} returned malformed XML-RPC: {e}", procedure) from e

        if len(params) != 1:
            logger.error("%s returned %d values, expected 1", procedure, len(params))
            raise TransportError(f"{procedure} returned {len(params)} values", procedure)

        return params[0]

    def get_ticket(self, ticket_id: int) -> Ticket:
        """Fetch a ticket snapshot. See Ticket.get."""
        return Ticket.get(ticket_id, self)

    def list_fields(self) -> list[TicketField]:
        """Fetch the ticket field schema. See tracflow.trac.fields.list_fields."""
        return list_fields(self)
