"""Error kinds surfaced by the readability pipeline.

Every error carries the HTTP status the API answers with and a stable
``code``; the message is what end users (and the chat relay) get to see.
"""


class ReadabilityError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidURLError(ReadabilityError):
    status_code = 400
    code = "INVALID_URL"


class UpstreamFetchError(ReadabilityError):
    """The page fetch failed or returned a non-success status."""

    status_code = 502
    code = "UPSTREAM_FETCH_FAILED"

    def __init__(self, message: str, upstream_status: int | None = None, body: str = ""):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class ExtractionError(ReadabilityError):
    status_code = 422
    code = "EXTRACTION_FAILED"


class SanitizationError(ReadabilityError):
    status_code = 500
    code = "SANITIZATION_FAILED"
