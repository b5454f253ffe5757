"""Custom exceptions for django-offerings.

Validation problems are returned as data (ValidationResult,
SubmissionResult). These exceptions cover misuse of the engine itself.
"""


class OfferingError(Exception):
    """Base exception for offering errors."""
    pass


class CurrencyMismatchError(OfferingError, ValueError):
    """Raised when attempting operations between different currencies."""
    pass


class UnknownSectionError(OfferingError):
    """Raised when updating a draft section that does not exist."""

    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Unknown draft section '{section}'")


class StoreDisposedError(OfferingError):
    """Raised when a disposed FormStateStore is used."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Form state store for draft '{draft_id}' has been disposed")


class InvalidTransition(OfferingError):
    """Raised when attempting a wizard transition the state machine forbids."""

    def __init__(self, from_state, to_state, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from '{from_state}' to '{to_state}'"
        super().__init__(self.reason)


class SubmissionInProgressError(OfferingError):
    """Raised when submit_form is called while a submission is pending."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Submission already in progress for draft '{draft_id}'")


class GatewayLoadError(OfferingError):
    """Raised when a persistence or publishing gateway cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load gateway '{path}': {reason}")
