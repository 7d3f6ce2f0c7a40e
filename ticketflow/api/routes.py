import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool

from ticketflow.api.schemas import AnalyzeResponse, ErrorResponse, StatusResponse, TicketCreatedResponse
from ticketflow.core.config import settings
from ticketflow.core.errors import PayloadTooLargeError
from ticketflow.deps import get_catalog, get_ticket_store
from ticketflow.domain.catalog import AnalysisCatalog
from ticketflow.services.ticket_store import TicketStore

logger = logging.getLogger(__name__)

router = APIRouter()

TicketId = Annotated[str, Query(alias="ticket-id", min_length=1)]
AnalysisType = Annotated[
    str | None,
    Query(alias="type", description="Analysis type; omit to target every analysis"),
]

_TICKET_ERRORS: dict[int | str, dict[str, Any]] = {404: {"model": ErrorResponse}}
_REQUEST_ERRORS: dict[int | str, dict[str, Any]] = {
    **_TICKET_ERRORS,
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}
_UPLOAD_ERRORS: dict[int | str, dict[str, Any]] = {**_TICKET_ERRORS, 413: {"model": ErrorResponse}}


@router.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


@router.get("/api/analyses", tags=["analyses"])
def list_analyses(catalog: AnalysisCatalog = Depends(get_catalog)) -> dict[str, list[str]]:
    return catalog.as_dict()


@router.post("/api/ticket/new", response_model=TicketCreatedResponse, tags=["tickets"])
def create_ticket(svc: TicketStore = Depends(get_ticket_store)):
    return TicketCreatedResponse(ticket_id=svc.create())


@router.post(
    "/api/ticket/video",
    response_model=StatusResponse,
    responses=_UPLOAD_ERRORS,
    tags=["tickets"],
)
async def upload_video(
    request: Request,
    ticket_id: TicketId,
    svc: TicketStore = Depends(get_ticket_store),
):
    # Store calls take ticket locks; keep them off the event loop.
    # Fail before draining the body when the ticket does not exist.
    await run_in_threadpool(svc.snapshot, ticket_id)

    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if settings.upload_max_bytes is not None and received > settings.upload_max_bytes:
            raise PayloadTooLargeError(f"Upload exceeds {settings.upload_max_bytes} bytes")

    logger.info("File received for ticket %s: %d bytes", ticket_id, received)
    await run_in_threadpool(svc.mark_video_ready, ticket_id)
    return StatusResponse()


@router.post(
    "/api/ticket/analyze",
    response_model=AnalyzeResponse,
    responses=_REQUEST_ERRORS,
    tags=["analyses"],
)
def request_analysis(
    ticket_id: TicketId,
    kind: AnalysisType = None,
    svc: TicketStore = Depends(get_ticket_store),
):
    deps = svc.request_analysis(ticket_id, kind or None)
    return AnalyzeResponse(request_deps=list(deps))


@router.post(
    "/api/ticket/cancel",
    response_model=StatusResponse,
    responses=_REQUEST_ERRORS,
    tags=["analyses"],
)
def cancel_analysis(
    ticket_id: TicketId,
    kind: AnalysisType = None,
    svc: TicketStore = Depends(get_ticket_store),
):
    svc.cancel(ticket_id, kind or None)
    return StatusResponse()


@router.get("/api/ticket/status", responses=_TICKET_ERRORS, tags=["tickets"])
def ticket_status(
    ticket_id: TicketId,
    send_results: bool = Query(False, alias="send-results"),
    svc: TicketStore = Depends(get_ticket_store),
) -> dict[str, Any]:
    return svc.status(ticket_id, full=send_results)


@router.post(
    "/api/ticket/delete",
    response_model=StatusResponse,
    responses=_TICKET_ERRORS,
    tags=["tickets"],
)
def delete_ticket(
    ticket_id: TicketId,
    svc: TicketStore = Depends(get_ticket_store),
):
    svc.delete(ticket_id)
    return StatusResponse()
