import logging
import threading

from ticketflow.core.errors import UnknownTicketError
from ticketflow.domain.models import InProgress, Ticket
from ticketflow.domain.ports import ResultProvider, TicketRepository

logger = logging.getLogger(__name__)


class ProgressEngine:
    """
    Advances simulated progress for every pending analysis.

    One sweep visits each ticket under that ticket's lock. Tickets without
    video are left untouched, so their work stays frozen until the upload
    arrives.
    """

    def __init__(
        self,
        repo: TicketRepository,
        results: ResultProvider,
        step: float = 0.01,
        interval: float = 0.1,
    ) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._repo = repo
        self._results = results
        self._step = step
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> int:
        """Run one sweep over all tickets; returns how many analyses completed."""
        completed = 0
        for ticket_id in self._repo.ids():
            try:
                with self._repo.checkout(ticket_id) as ticket:
                    completed += self._advance(ticket)
            except UnknownTicketError:
                # Deleted between listing and checkout.
                continue
        logger.debug("Progress sweep finished; %d analyses completed", completed)
        return completed

    def _advance(self, ticket: Ticket) -> int:
        if not ticket.has_video:
            return 0

        completed = 0
        for kind in list(ticket.pending):
            status = ticket.results.get(kind)
            if not isinstance(status, InProgress):
                ticket.results[kind] = InProgress(fraction=0.0)
                continue

            fraction = status.fraction + self._step
            if fraction >= 1.0:
                ticket.complete(kind, self._results.result_for(kind))
                completed += 1
                logger.info("Ticket %s finished %s", ticket.id, kind)
            else:
                ticket.results[kind] = InProgress(fraction=fraction)
        return completed

    def start(self) -> None:
        if self.running:
            if not self._stop.is_set():
                return
            # A previous stop timed out mid-sweep; that thread must finish first.
            self._thread.join()
        # Each run owns its event so an old thread can never be re-armed.
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name="progress-engine", daemon=True
        )
        self._thread.start()
        logger.info("Progress engine started (step=%s, interval=%ss)", self._step, self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Progress engine still finishing a sweep after %ss", timeout)
                return
            self._thread = None
        logger.info("Progress engine stopped")

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self._interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Progress sweep failed")
