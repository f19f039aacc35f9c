class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class JargonNotFoundError(DomainError):
    """Exception raised when a jargon mapping is not found in the database."""

    pass


class DuplicateJargonError(DomainError):
    """Exception raised when a slang term is already mapped."""

    pass
