class RepositoryError(Exception):
    """Base repository error."""


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database is unavailable or not configured."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist."""


class RepositoryConflictError(RepositoryError):
    """Raised when a write would violate a record invariant."""


class RepositoryValidationError(RepositoryError):
    """Raised when payload validation fails before persistence."""


class MalformedIdError(RepositoryValidationError):
    """Raised when an id token cannot be turned into a store key."""


class DuplicateBidError(RepositoryConflictError):
    """Raised when the bidder already has a bid on the job."""
