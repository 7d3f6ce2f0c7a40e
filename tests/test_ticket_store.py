import re

import pytest

from ticketflow.core.errors import (
    AlreadyRequestedError,
    NotRequestedError,
    UnknownAnalysisKindError,
    UnknownTicketError,
)
from ticketflow.domain.catalog import DEFAULT_CATALOG, AnalysisKind
from ticketflow.domain.models import Completed, InProgress
from ticketflow.domain.resolver import DependencyResolver
from ticketflow.infra.memory_repo import InMemoryTicketRepository
from ticketflow.services.ticket_store import TicketStore, new_ticket_id


@pytest.fixture
def repo() -> InMemoryTicketRepository:
    return InMemoryTicketRepository()


@pytest.fixture
def store(repo) -> TicketStore:
    return TicketStore(repo=repo, resolver=DependencyResolver(DEFAULT_CATALOG))


def test_new_ticket_id_format():
    assert re.fullmatch(r"[0-9a-f]{4}(-[0-9a-f]{4}){3}", new_ticket_id())


class TestLifecycle:
    def test_create_returns_empty_ticket(self, store, repo):
        ticket_id = store.create()
        snap = store.snapshot(ticket_id)
        assert snap.id == ticket_id
        assert snap.has_video is False
        assert snap.pending == ()
        assert snap.results == {}
        assert repo.ids() == [ticket_id]

    def test_create_retries_on_id_collision(self, repo):
        ids = iter(["aaaa-aaaa-aaaa-aaaa", "aaaa-aaaa-aaaa-aaaa", "bbbb-bbbb-bbbb-bbbb"])
        store = TicketStore(repo=repo, resolver=DependencyResolver(DEFAULT_CATALOG), id_factory=lambda: next(ids))
        assert store.create() == "aaaa-aaaa-aaaa-aaaa"
        assert store.create() == "bbbb-bbbb-bbbb-bbbb"

    def test_mark_video_ready_is_idempotent(self, store):
        ticket_id = store.create()
        store.mark_video_ready(ticket_id)
        store.mark_video_ready(ticket_id)
        assert store.snapshot(ticket_id).has_video is True

    def test_delete_removes_ticket(self, store):
        ticket_id = store.create()
        store.delete(ticket_id)
        with pytest.raises(UnknownTicketError):
            store.snapshot(ticket_id)
        with pytest.raises(UnknownTicketError):
            store.delete(ticket_id)

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.mark_video_ready("missing"),
            lambda s: s.request_analysis("missing", "transcription"),
            lambda s: s.request_analysis("missing"),
            lambda s: s.cancel("missing", "transcription"),
            lambda s: s.cancel("missing"),
            lambda s: s.snapshot("missing"),
            lambda s: s.status("missing"),
            lambda s: s.delete("missing"),
        ],
    )
    def test_unknown_ticket(self, store, call):
        with pytest.raises(UnknownTicketError):
            call(store)

    def test_snapshot_results_are_read_only(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "audio")
        snap = store.snapshot(ticket_id)
        with pytest.raises(TypeError):
            snap.results[AnalysisKind.AUDIO] = Completed(payload={})
        assert snap.results == {AnalysisKind.AUDIO: InProgress(fraction=0.0)}

    def test_snapshot_is_a_copy(self, store, repo):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "transcription")
        snap = store.snapshot(ticket_id)
        with repo.checkout(ticket_id) as ticket:
            ticket.complete(AnalysisKind.TRANSCRIPTION, {"text": "hello"})
        assert snap.results[AnalysisKind.TRANSCRIPTION] == InProgress(fraction=0.0)
        assert snap.pending == (AnalysisKind.TRANSCRIPTION,)


class TestRequestAnalysis:
    def test_request_reports_pulled_in_dependencies(self, store):
        ticket_id = store.create()
        deps = store.request_analysis(ticket_id, "metrics")
        assert deps == (AnalysisKind.TRANSCRIPTION,)
        snap = store.snapshot(ticket_id)
        assert snap.pending == (AnalysisKind.METRICS, AnalysisKind.TRANSCRIPTION)
        assert snap.results == {
            AnalysisKind.METRICS: InProgress(fraction=0.0),
            AnalysisKind.TRANSCRIPTION: InProgress(fraction=0.0),
        }

    def test_already_pending_dependency_is_not_reported(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "transcription")
        assert store.request_analysis(ticket_id, "metrics") == ()
        assert store.snapshot(ticket_id).pending == (AnalysisKind.TRANSCRIPTION, AnalysisKind.METRICS)

    def test_second_request_is_rejected(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "transcription")
        with pytest.raises(AlreadyRequestedError):
            store.request_analysis(ticket_id, "transcription")

    def test_request_of_a_pending_dependency_is_rejected(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "metrics")
        with pytest.raises(AlreadyRequestedError):
            store.request_analysis(ticket_id, "transcription")

    def test_request_of_a_completed_kind_is_rejected(self, store, repo):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "audio")
        with repo.checkout(ticket_id) as ticket:
            ticket.complete(AnalysisKind.AUDIO, {})
        with pytest.raises(AlreadyRequestedError):
            store.request_analysis(ticket_id, "audio")

    def test_unknown_kind_leaves_ticket_untouched(self, store):
        ticket_id = store.create()
        with pytest.raises(UnknownAnalysisKindError):
            store.request_analysis(ticket_id, "lip-reading")
        assert store.snapshot(ticket_id).pending == ()

    def test_request_all_schedules_everything(self, store):
        ticket_id = store.create()
        assert store.request_analysis(ticket_id) == ()
        assert store.snapshot(ticket_id).pending == DEFAULT_CATALOG.all_kinds()

    def test_request_all_tolerates_overlap(self, store, repo):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "metrics")
        with repo.checkout(ticket_id) as ticket:
            ticket.results[AnalysisKind.METRICS] = InProgress(fraction=0.5)
            ticket.complete(AnalysisKind.TRANSCRIPTION, {"text": "done"})
        store.request_analysis(ticket_id)
        snap = store.snapshot(ticket_id)
        assert AnalysisKind.TRANSCRIPTION not in snap.pending
        assert isinstance(snap.results[AnalysisKind.TRANSCRIPTION], Completed)
        assert snap.results[AnalysisKind.METRICS] == InProgress(fraction=0.5)
        assert len(snap.pending) == len(set(snap.pending)) == len(DEFAULT_CATALOG.all_kinds()) - 1


class TestCancel:
    def test_cancel_removes_all_trace(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "transcription")
        store.cancel(ticket_id, "transcription")
        snap = store.snapshot(ticket_id)
        assert snap.pending == ()
        assert snap.results == {}

    def test_cancel_then_request_is_fresh(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "metrics")
        store.cancel(ticket_id, "metrics")
        store.cancel(ticket_id, "transcription")
        assert store.request_analysis(ticket_id, "metrics") == (AnalysisKind.TRANSCRIPTION,)

    def test_cancel_completed_kind(self, store, repo):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "audio")
        with repo.checkout(ticket_id) as ticket:
            ticket.complete(AnalysisKind.AUDIO, {"channels": 2})
        store.cancel(ticket_id, "audio")
        assert store.snapshot(ticket_id).results == {}
        store.request_analysis(ticket_id, "audio")

    def test_cancel_keeps_dependencies(self, store):
        ticket_id = store.create()
        store.request_analysis(ticket_id, "metrics")
        store.cancel(ticket_id, "metrics")
        assert store.snapshot(ticket_id).pending == (AnalysisKind.TRANSCRIPTION,)

    @pytest.mark.parametrize("kind", ["transcription", "lip-reading"])
    def test_cancel_inactive_kind(self, store, kind):
        ticket_id = store.create()
        with pytest.raises(NotRequestedError):
            store.cancel(ticket_id, kind)

    def test_cancel_all(self, store):
        ticket_id = store.create()
        store.cancel(ticket_id)
        store.request_analysis(ticket_id)
        store.cancel(ticket_id)
        snap = store.snapshot(ticket_id)
        assert snap.pending == ()
        assert snap.results == {}
