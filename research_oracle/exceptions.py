class ResearchOracleException(Exception):
    """Base exception for the research oracle backend."""


class ConfigurationError(ResearchOracleException):
    """A required setting (API key, URL) is missing."""


class RequestRejected(ResearchOracleException):
    """The caller is not allowed to use the endpoint (bot filter, rate limit)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class RepositoryException(ResearchOracleException):
    """A corpus query or stored procedure call failed."""


class EmbeddingException(ResearchOracleException):
    """The embedding provider could not embed the query."""


class CompletionException(ResearchOracleException):
    """Base exception for the chat completion provider."""


class CompletionConnectionError(CompletionException):
    """The completion provider could not be reached."""


class CompletionTimeoutError(CompletionException):
    """The completion provider did not answer in time."""


class CompletionAPIError(CompletionException):
    """The completion provider answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Completion API Error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body
