"""Custom exceptions for the persistence layer."""


class PersistenceFailure(Exception):
    """Raised when the user store cannot complete a read or write."""

    code = "persistence_failure"
    status_code = 503
    public_message = "We could not complete sign-in right now. Please try again."
