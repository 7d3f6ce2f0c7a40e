class AppError(Exception):
    """Base app exception."""

    code = "internal-error"


class ValidationError(AppError):
    code = "bad-request"


class NotFoundError(AppError):
    code = "not-found"


class ConflictError(AppError):
    code = "conflict"


class ConfigurationError(AppError):
    code = "bad-configuration"


class UnknownTicketError(NotFoundError):
    code = "bad-ticket"

    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket not found: {ticket_id}")
        self.ticket_id = ticket_id


class DuplicateTicketError(ConflictError):
    code = "duplicate-ticket"

    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket already exists: {ticket_id}")
        self.ticket_id = ticket_id


class UnknownAnalysisKindError(ValidationError):
    code = "bad-type"

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown analysis type: {kind}")
        self.kind = kind


class AlreadyRequestedError(ConflictError):
    code = "already-analyzing"

    def __init__(self, ticket_id: str, kind: str) -> None:
        super().__init__(f"Analysis {kind} already requested for ticket {ticket_id}")
        self.ticket_id = ticket_id
        self.kind = kind


class NotRequestedError(ConflictError):
    code = "not-analyzed"

    def __init__(self, ticket_id: str, kind: str) -> None:
        super().__init__(f"Analysis {kind} is not requested for ticket {ticket_id}")
        self.ticket_id = ticket_id
        self.kind = kind


class PayloadTooLargeError(ValidationError):
    code = "too-large"
