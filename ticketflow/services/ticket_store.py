import logging
import secrets
from typing import Any, Callable

from ticketflow.core.errors import (
    AlreadyRequestedError,
    DuplicateTicketError,
    NotRequestedError,
)
from ticketflow.domain.catalog import AnalysisKind
from ticketflow.domain.models import Ticket, TicketSnapshot
from ticketflow.domain.ports import TicketRepository
from ticketflow.domain.resolver import DependencyResolver
from ticketflow.services.status import project_status

logger = logging.getLogger(__name__)


def new_ticket_id() -> str:
    digits = secrets.token_hex(8)
    return "-".join(digits[i : i + 4] for i in range(0, len(digits), 4))


class TicketStore:
    """
    Orchestrates the ticket use-cases:
    - create / delete tickets and record that video arrived
    - schedule analyses together with their dependencies
    - cancel one or all analyses
    - hand out snapshots and status views

    All ticket state lives in the repository; each call checks a ticket out
    for its own duration only.
    """

    def __init__(
        self,
        repo: TicketRepository,
        resolver: DependencyResolver,
        id_factory: Callable[[], str] = new_ticket_id,
    ) -> None:
        self._repo = repo
        self._resolver = resolver
        self._id_factory = id_factory

    def create(self) -> str:
        while True:
            ticket = Ticket(id=self._id_factory())
            try:
                self._repo.add(ticket)
            except DuplicateTicketError:
                logger.warning("Ticket id collision on %s; drawing a new id", ticket.id)
                continue
            logger.info("Created ticket %s", ticket.id)
            return ticket.id

    def mark_video_ready(self, ticket_id: str) -> None:
        with self._repo.checkout(ticket_id) as ticket:
            if not ticket.has_video:
                logger.info("Video ready for ticket %s", ticket_id)
            ticket.has_video = True

    def delete(self, ticket_id: str) -> None:
        self._repo.remove(ticket_id)
        logger.info("Deleted ticket %s", ticket_id)

    def request_analysis(self, ticket_id: str, kind: str | None = None) -> tuple[AnalysisKind, ...]:
        """
        Schedule ``kind`` plus whatever it depends on, or every known analysis.

        Returns the dependencies this call added (never ``kind`` itself).
        A request for every analysis returns an empty tuple.
        """
        with self._repo.checkout(ticket_id) as ticket:
            if kind is None:
                wanted = self._resolver.expand_all()
            else:
                wanted = self._resolver.expand(kind)
                requested = wanted[0]
                if ticket.is_active(requested):
                    raise AlreadyRequestedError(ticket_id, requested)

            added = [k for k in wanted if not ticket.is_active(k)]
            for k in added:
                ticket.schedule(k)

        logger.info("Ticket %s scheduled %s", ticket_id, ", ".join(added) or "nothing")
        if kind is None:
            return ()
        return tuple(k for k in added if k != wanted[0])

    def cancel(self, ticket_id: str, kind: str | None = None) -> None:
        with self._repo.checkout(ticket_id) as ticket:
            if kind is None:
                ticket.clear()
                logger.info("Ticket %s cancelled all analyses", ticket_id)
                return
            if not ticket.is_active(kind):
                raise NotRequestedError(ticket_id, kind)
            ticket.discard(kind)
        logger.info("Ticket %s cancelled %s", ticket_id, kind)

    def snapshot(self, ticket_id: str) -> TicketSnapshot:
        with self._repo.checkout(ticket_id) as ticket:
            return ticket.snapshot()

    def status(self, ticket_id: str, full: bool = False) -> dict[str, Any]:
        return project_status(self.snapshot(ticket_id), full=full)
