import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from ticketflow.core.errors import DuplicateTicketError, UnknownTicketError
from ticketflow.domain.models import Ticket
from ticketflow.domain.ports import TicketRepository


@dataclass
class _Entry:
    ticket: Ticket
    lock: threading.Lock = field(default_factory=threading.Lock)
    removed: bool = False


class InMemoryTicketRepository(TicketRepository):
    """
    Process-local ticket registry.

    Every ticket has its own lock; ``checkout`` holds it for the duration of
    the ``with`` block. The registry lock only guards the id -> entry map and
    is never held while a ticket is being worked on.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def add(self, ticket: Ticket) -> None:
        with self._lock:
            if ticket.id in self._entries:
                raise DuplicateTicketError(ticket.id)
            self._entries[ticket.id] = _Entry(ticket=ticket)

    def remove(self, ticket_id: str) -> None:
        with self._lock:
            entry = self._entries.pop(ticket_id, None)
        if entry is None:
            raise UnknownTicketError(ticket_id)
        # Wait for whoever holds the ticket, then poison the entry for late arrivals.
        with entry.lock:
            entry.removed = True

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    @contextmanager
    def checkout(self, ticket_id: str) -> Iterator[Ticket]:
        with self._lock:
            entry = self._entries.get(ticket_id)
        if entry is None:
            raise UnknownTicketError(ticket_id)
        with entry.lock:
            if entry.removed:
                raise UnknownTicketError(ticket_id)
            yield entry.ticket
