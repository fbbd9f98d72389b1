class AnalysisError(Exception):
    """Base class for failures surfaced to API callers.

    ``status_code`` is the HTTP status the API responds with; ``message`` is
    safe to show to the end user.
    """

    status_code = 502

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AnalysisError):
    """A required API key or endpoint is not configured."""

    status_code = 500


class InvalidProfileIdError(AnalysisError):
    status_code = 400


class NotFoundError(AnalysisError):
    """The upstream service reported 404."""


class ProfileNotFoundError(NotFoundError):
    status_code = 404


class UpstreamTimeoutError(AnalysisError):
    status_code = 504


class RateLimitError(AnalysisError):
    """Still rate limited after the bounded retries."""

    status_code = 429


class InvalidResponseError(AnalysisError):
    """An upstream payload did not have the expected shape."""


class UpstreamError(AnalysisError):
    pass
