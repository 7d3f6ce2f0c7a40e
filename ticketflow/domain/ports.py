from contextlib import AbstractContextManager
from typing import Any, Protocol

from ticketflow.domain.catalog import AnalysisKind
from ticketflow.domain.models import Ticket


class TicketRepository(Protocol):
    def add(self, ticket: Ticket) -> None: ...

    def remove(self, ticket_id: str) -> None: ...

    def ids(self) -> list[str]: ...

    def checkout(self, ticket_id: str) -> AbstractContextManager[Ticket]: ...


class ResultProvider(Protocol):
    def result_for(self, kind: AnalysisKind) -> dict[str, Any]: ...
