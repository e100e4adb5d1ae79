"""Shared error definitions for CaseBridge."""


class CaseBridgeError(Exception):
    """Base exception for CaseBridge."""
    pass


class PermanentError(CaseBridgeError):
    """Error that should not be retried."""
    pass


class RetryableError(CaseBridgeError):
    """Error that can be retried by the caller."""
    pass


class NotFound(PermanentError):
    """Referenced record does not exist."""
    pass


class CaseNotFound(NotFound):
    """Case not found in database."""

    def __init__(self, case_id: str):
        super().__init__("Case not found")
        self.case_id = case_id


class QuoteNotFound(NotFound):
    """Quote not found in database."""

    def __init__(self, quote_id: str):
        super().__init__("Quote not found")
        self.quote_id = quote_id


class PaymentNotFound(NotFound):
    """Payment not found in database."""

    def __init__(self, reference: str):
        super().__init__("Payment not found")
        self.reference = reference


class FileNotFound(NotFound):
    """Case file not found in database or storage."""

    def __init__(self, file_id: str):
        super().__init__("File not found")
        self.file_id = file_id


class Forbidden(PermanentError):
    """Actor lacks permission for an existing resource."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class InvalidState(PermanentError):
    """Operation violates a lifecycle rule."""
    pass


class Conflict(PermanentError):
    """Duplicate operation detected."""
    pass


class InvalidSignature(PermanentError):
    """Webhook signature verification failed."""
    pass


class PaymentProcessorError(PermanentError):
    """Payment processor rejected the request."""
    pass


class PaymentProviderUnavailable(RetryableError):
    """Payment processor timed out or failed transiently."""
    pass
