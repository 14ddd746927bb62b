"""API error classes.

Every failure the onboarding core can report is an APIError subclass with a
machine-readable code and an HTTP status, so routers never translate errors
by hand. Services raise these directly; main.py renders them into the
standard error envelope.
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Use for missing or malformed fields in schedule, feedback, activation
    and intake commands.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Duplicate or conflicting resource (409).

    Accepts custom code for specific conflict types.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details,
        )


class InvalidStateError(APIError):
    """Business rule violation (422).

    Use when the request is well-formed but the candidate is in the wrong
    stage for it, e.g. activating someone who has not been accepted.
    """

    def __init__(self, message: str) -> None:
        super().__init__(
            code="INVALID_STATE",
            message=message,
            status_code=422,
        )


class IllegalTransitionError(APIError):
    """Requested stage is not reachable from the current stage (422).

    Attributes:
        current_stage: Stage value the candidate is in.
        target_stage: Stage value that was requested.
        valid_targets: Stage values reachable from current_stage.
    """

    def __init__(
        self,
        current_stage: str,
        target_stage: str,
        valid_targets: list[str],
    ) -> None:
        self.current_stage = current_stage
        self.target_stage = target_stage
        self.valid_targets = valid_targets
        super().__init__(
            code="ILLEGAL_TRANSITION",
            message=(
                f"Cannot transition from {current_stage} to {target_stage}. "
                f"Valid transitions: {valid_targets or 'none (terminal stage)'}"
            ),
            status_code=422,
        )


class AlreadyActivatedError(ConflictError):
    """Candidate already has a provisioned login identity (409)."""

    def __init__(self, candidate_id: str, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(
            code="ALREADY_ACTIVATED",
            message=(
                f"Candidate '{candidate_id}' is already activated "
                f"as '{account_id}'"
            ),
        )


class StaleRecordError(ConflictError):
    """Record changed since it was read (409).

    Raised by candidate sources when the stored version does not match the
    version the mutation was based on.
    """

    def __init__(self, candidate_id: str) -> None:
        super().__init__(
            code="STALE_RECORD",
            message=(
                f"Candidate '{candidate_id}' was modified by another request. "
                "Reload and retry."
            ),
        )


class PersistError(APIError):
    """Candidate store could not save the record (503)."""

    def __init__(self, message: str = "Failed to save candidate record") -> None:
        super().__init__(
            code="PERSIST_FAILED",
            message=message,
            status_code=503,
        )


class UpstreamError(APIError):
    """An external collaborator failed after retries (502).

    Accepts a custom code naming the collaborator operation
    (e.g., PROVISION_FAILED, EXTRACTION_FAILED).
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=502,
        )
