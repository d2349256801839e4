"""Exceptions raised by the practice session engine."""


class CatalogUnavailableError(Exception):
    """The practice catalog could not be reached or returned an unusable response."""


class SubmissionError(Exception):
    """A session result could not be delivered to the persistence service."""


class InvalidPhaseTransitionError(ValueError):
    """An operation was attempted in a session phase that does not allow it."""


class SessionAlreadyActiveError(ValueError):
    """A new session was requested while the user still has one running."""


class SessionNotFoundError(ValueError):
    """No session is registered for the given user."""
