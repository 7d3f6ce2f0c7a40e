from typing import Any

from ticketflow.domain.models import Completed, InProgress, TicketSnapshot


def project_status(snapshot: TicketSnapshot, full: bool = False) -> dict[str, Any]:
    """
    Render a ticket's results for clients.

    In-progress analyses show their fraction. Completed analyses show their
    payload when ``full`` is set and an empty object otherwise, so pollers can
    see that work finished without downloading it.
    """
    view: dict[str, Any] = {}
    for kind, status in snapshot.results.items():
        if isinstance(status, InProgress):
            view[kind.value] = status.fraction
        elif isinstance(status, Completed):
            view[kind.value] = status.payload if full else {}
    return view
