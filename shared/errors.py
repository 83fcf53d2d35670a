"""
Shared error handling for the Order Cache service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class OrderServiceException(Exception):
    """Base exception for the Order Cache service."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidOrderIdError(OrderServiceException):
    """Order identifier is missing or malformed."""

    def __init__(self, message: str = "Invalid order id", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ORDER_ID", message, details)


class OrderNotFoundError(OrderServiceException):
    """No cached order for the requested identifier."""

    status_code = 404

    def __init__(self, order_uid: str):
        super().__init__("ORDER_NOT_FOUND", "Order not found", {"order_uid": order_uid})


class OrderDecodeError(OrderServiceException):
    """Payload could not be decoded into an order."""

    status_code = 422

    def __init__(self, message: str = "Malformed order payload", details: Optional[Dict[str, Any]] = None):
        super().__init__("ORDER_DECODE_ERROR", message, details)


class ExternalServiceError(OrderServiceException):
    """External service errors."""

    status_code = 503

    def __init__(self, code: str, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, f"{service}: {message}", details)


class StoreUnavailableError(ExternalServiceError):
    """Durable store could not be reached."""

    def __init__(self, message: str = "Store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", "store", message, details)


class StoreWriteError(ExternalServiceError):
    """Durable store rejected a write."""

    def __init__(self, message: str = "Write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_WRITE_FAILED", "store", message, details)


class StoreReadError(ExternalServiceError):
    """Durable store could not be enumerated."""

    def __init__(self, message: str = "Read failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_READ_FAILED", "store", message, details)


class ConsumerError(ExternalServiceError):
    """Message stream consumer errors."""

    def __init__(self, code: str, message: str = "Consumer error", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, "kafka", message, details)
