from typing import Optional, Any


class RoscaBotError(Exception):
    """
    Base exception for the ROSCA bot application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(RoscaBotError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class ValidationError(RoscaBotError):
    """
    Raised when conversational input fails validation.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class AuthError(RoscaBotError):
    """
    Raised when a wallet-link attempt cannot be authenticated.
    """
    def __init__(self, message: str = "Authentication failed", code: str = "AUTHENTICATION_FAILED", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=400, details=details)


class BadRequestError(AuthError):
    """
    Raised when a link request is missing fields or is malformed.
    """
    def __init__(self, message: str = "Missing required fields", details: Optional[Any] = None):
        super().__init__(message, code="BAD_REQUEST", details=details)


class InvalidSignatureError(AuthError):
    """
    Raised when a signature cannot be parsed or recovered.
    """
    def __init__(self, message: str = "Invalid signature", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_SIGNATURE", details=details)


class SignatureMismatchError(AuthError):
    """
    Raised when the recovered signer differs from the claimed address.
    """
    def __init__(self, message: str = "Signature does not match the claimed address", details: Optional[Any] = None):
        super().__init__(message, code="SIGNATURE_MISMATCH", details=details)


class NotLinkedError(RoscaBotError):
    """
    Raised when an action requires a linked wallet and none is stored.
    """
    def __init__(self, message: str = "No wallet linked", details: Optional[Any] = None):
        super().__init__(message, code="NOT_LINKED", status_code=403, details=details)


class ChainQueryError(RoscaBotError):
    """
    Raised when a read from the registry or a group contract fails.
    """
    def __init__(self, message: str = "Blockchain query failed", details: Optional[Any] = None):
        super().__init__(message, code="CHAIN_QUERY_ERROR", status_code=502, details=details)


class PersistenceError(RoscaBotError):
    """
    Raised when the persistent store cannot be read or written.
    """
    def __init__(self, message: str = "Storage operation failed", details: Optional[Any] = None):
        super().__init__(message, code="PERSISTENCE_ERROR", status_code=500, details=details)


class DeliveryError(RoscaBotError):
    """
    Raised when an outbound chat message cannot be delivered.
    """
    def __init__(self, message: str = "Message delivery failed", details: Optional[Any] = None):
        super().__init__(message, code="DELIVERY_ERROR", status_code=502, details=details)
