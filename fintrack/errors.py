"""Exception hierarchy for FinTrack persistence and authentication failures.

Validation problems are reported through
:class:`fintrack.validation.ValidationResult` and are never raised.
"""


class FinTrackError(Exception):
    """Base class for errors surfaced to the presentation layer."""


class StoreError(FinTrackError):
    """A read or write against the expense store failed."""


class AuthError(FinTrackError):
    """Sign-up, sign-in or sign-out failed."""
