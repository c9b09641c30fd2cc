# busboard/errors.py
# Exceptions raised by the unit stores and by caller-side validation.


class StoreError(Exception):
    """Base class for any failure of a store backend."""


class StoreConnectionError(StoreError):
    """The backend could not be reached or answered with a non-success status."""


class MalformedResponseError(StoreError):
    """The backend answered, but not with the JSON we expected (e.g. an HTML error page)."""


class BackendError(StoreError):
    """The backend answered with an ``{"error": ...}`` payload."""


class AuthenticationError(StoreError):
    pass


class ValidationError(ValueError):
    """Rejected before any store is touched."""


class DuplicateUnitError(ValidationError):
    pass


class InvalidStatusError(ValidationError):
    pass
