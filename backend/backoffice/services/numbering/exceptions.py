"""Document numbering exceptions.

A collision (candidate already taken) is not an exception: the allocator
handles it internally. Only failures the caller has to react to are raised.
"""

from backoffice.services.exceptions import ServiceError, ValidationError


class NumberingError(ServiceError):
    """Base class for document numbering failures."""

    pass


class OracleUnavailable(NumberingError):
    """The existence check for a candidate number could not be performed."""

    pass


class AllocationExhausted(NumberingError):
    """Every insert attempt hit the document number unique constraint."""

    def __init__(self, prefix: str, scope_key: int, attempts: int):
        self.prefix = prefix
        self.scope_key = scope_key
        self.attempts = attempts
        super().__init__(
            f"Could not store a unique {prefix}-{scope_key} document number after {attempts} attempts"
        )


class InvalidDocumentNumber(ValidationError):
    """Value does not match the PREFIX-SCOPE-DISCRIMINATOR format."""

    pass
