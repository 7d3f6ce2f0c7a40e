from pydantic import BaseModel, ConfigDict, Field

from ticketflow.domain.catalog import AnalysisKind


class StatusResponse(BaseModel):
    status: str = "success"


class ErrorResponse(BaseModel):
    status: str = Field(..., description="Machine-readable error code, e.g. bad-ticket")
    detail: str


class TicketCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: str = Field(..., alias="ticket-id")


class AnalyzeResponse(StatusResponse):
    model_config = ConfigDict(populate_by_name=True)

    request_deps: list[AnalysisKind] = Field(
        default_factory=list,
        alias="request-deps",
        description="Dependencies newly pulled in by this request",
    )
