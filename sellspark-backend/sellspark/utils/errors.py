# sellspark/utils/errors.py


class ConsultationError(Exception):
    """Base class for everything the consultation engine raises."""


class ValidationError(ConsultationError):
    """Rejected request. Not retried."""


class SessionNotFoundError(ConsultationError):
    pass


class ConsultationNotCompleteError(ConsultationError):
    pass


class ConcurrencyConflictError(ConsultationError):
    """
    The session changed between read and commit.
    Caller should re-fetch the session and resubmit.
    """


class StoreUnavailableError(ConsultationError):
    pass


class CompletionError(ConsultationError):
    """
    Text completion service failed, timed out or is not configured.
    Handled inside the engine by the deterministic fallbacks.
    """
