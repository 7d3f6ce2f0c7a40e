from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ticketflow.domain.catalog import AnalysisKind


class InProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    fraction: float = Field(0.0, ge=0.0, lt=1.0, description="Completion in [0, 1)")


class Completed(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: dict[str, Any] = Field(default_factory=dict)


# A kind missing from Ticket.results is "absent": never requested, or cancelled.
AnalysisStatus = InProgress | Completed
StatusMap = Mapping[AnalysisKind, AnalysisStatus]


class TicketSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    has_video: bool
    pending: tuple[AnalysisKind, ...]
    results: StatusMap

    @field_validator("results", mode="after")
    @classmethod
    def _read_only_results(cls, value: StatusMap) -> StatusMap:
        return MappingProxyType(dict(value))


class Ticket(BaseModel):
    """
    One uploaded video and the analyses requested against it.

    Mutated only by the ticket store and the progress engine while they hold
    the ticket's lock.
    """

    id: str
    has_video: bool = False
    pending: list[AnalysisKind] = Field(default_factory=list)
    results: dict[AnalysisKind, AnalysisStatus] = Field(default_factory=dict)

    def is_pending(self, kind: str) -> bool:
        return kind in self.pending

    def is_completed(self, kind: str) -> bool:
        return isinstance(self.results.get(kind), Completed)

    def is_active(self, kind: str) -> bool:
        return self.is_pending(kind) or self.is_completed(kind)

    def schedule(self, kind: AnalysisKind) -> None:
        if kind not in self.pending:
            self.pending.append(kind)
        self.results[kind] = InProgress(fraction=0.0)

    def complete(self, kind: AnalysisKind, payload: dict[str, Any]) -> None:
        self.results[kind] = Completed(payload=payload)
        if kind in self.pending:
            self.pending.remove(kind)

    def discard(self, kind: str) -> None:
        if kind in self.pending:
            self.pending.remove(kind)
        self.results.pop(kind, None)

    def clear(self) -> None:
        self.pending.clear()
        self.results.clear()

    def snapshot(self) -> TicketSnapshot:
        return TicketSnapshot(
            id=self.id,
            has_video=self.has_video,
            pending=tuple(self.pending),
            results={kind: status.model_copy(deep=True) for kind, status in self.results.items()},
        )
