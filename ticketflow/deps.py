from functools import lru_cache

from ticketflow.core.config import settings
from ticketflow.domain.catalog import DEFAULT_CATALOG, AnalysisCatalog
from ticketflow.domain.resolver import DependencyResolver
from ticketflow.infra.memory_repo import InMemoryTicketRepository
from ticketflow.infra.placeholder_results import PlaceholderResultProvider
from ticketflow.services.progress import ProgressEngine
from ticketflow.services.ticket_store import TicketStore


def get_catalog() -> AnalysisCatalog:
    return DEFAULT_CATALOG


@lru_cache(maxsize=1)
def get_ticket_repository() -> InMemoryTicketRepository:
    return InMemoryTicketRepository()


@lru_cache(maxsize=1)
def get_result_provider() -> PlaceholderResultProvider:
    return PlaceholderResultProvider(seed=settings.placeholder_seed)


@lru_cache(maxsize=1)
def get_progress_engine() -> ProgressEngine:
    return ProgressEngine(
        repo=get_ticket_repository(),
        results=get_result_provider(),
        step=settings.progress_step,
        interval=settings.progress_tick_interval_s,
    )


def get_ticket_store() -> TicketStore:
    return TicketStore(repo=get_ticket_repository(), resolver=DependencyResolver(get_catalog()))


def reset_state() -> None:
    """Drop every cached singleton, stopping the progress engine first."""
    if get_progress_engine.cache_info().currsize:
        get_progress_engine().stop()
    for cached in (get_progress_engine, get_result_provider, get_ticket_repository):
        cached.cache_clear()
