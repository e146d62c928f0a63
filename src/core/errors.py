"""Error taxonomy for the recommendation pipeline.

Each error carries the HTTP status and a stable machine-readable code so the API
layer can render it without knowing where it was raised.
"""


class SnapSongError(Exception):
    """Base exception for the service."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(SnapSongError):
    """The client sent an unusable request (missing photo, bad form field)."""

    status_code = 400
    code = "invalid_request"


class UpstreamError(SnapSongError):
    """An external service could not be reached or answered with a non-success status."""

    status_code = 500
    code = "upstream_error"


class ContractViolation(SnapSongError):
    """The analysis service answered, but without a usable title/artist pair."""

    status_code = 500
    code = "contract_violation"
