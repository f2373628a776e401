"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class FetchError(DomainException):
    """Risk API call failed: transport error or non-success response"""

    def __init__(self, operation: str, cause: BaseException | str, detail: str | None = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {detail or cause}")


class MalformedResponseError(FetchError):
    """Response body does not decode into applicant records"""

    pass
