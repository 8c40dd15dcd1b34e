class BuddyGuardError(Exception):
    """Base class for every error raised by the incident backend."""


class TransientStoreError(BuddyGuardError):
    """The data store could not be reached or refused the request."""


class ValidationError(BuddyGuardError):
    """A submission is missing required fields. Raised before any store call."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")


class Forbidden(BuddyGuardError):
    """The acting role may not perform this operation."""


class NoWritableField(Forbidden):
    """The acting role owns no note field."""


class IncidentNotFound(BuddyGuardError):
    pass


class ProfileNotFound(BuddyGuardError):
    pass


class SessionNotFound(BuddyGuardError):
    pass


class ClassifierUnavailable(BuddyGuardError):
    """Raised inside classifier providers; the adapter absorbs it."""
