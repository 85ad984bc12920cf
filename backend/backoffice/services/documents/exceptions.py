"""Business document domain exceptions."""

from backoffice.services.exceptions import NotFoundError


class DocumentNotFound(NotFoundError):
    """No document carries the requested number."""

    pass
