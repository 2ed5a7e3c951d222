# backend/app/core/exceptions.py

from typing import Any, Optional


class PriceScanException(Exception):
    """Base PriceScan exception."""

    def __init__(
        self,
        detail: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(detail)


class UserNotFoundException(PriceScanException):
    """User not found exception."""

    def __init__(self, detail: str = "User not found"):
        super().__init__(detail=detail, status_code=404, error_code="USER_NOT_FOUND")


class UserAlreadyExistsException(PriceScanException):
    """Duplicate user exception."""

    def __init__(self, detail: str = "User already exists"):
        super().__init__(detail=detail, status_code=409, error_code="USER_EXISTS")


class ProductNotFoundException(PriceScanException):
    """Product not found exception."""

    def __init__(self, detail: str = "Product not found"):
        super().__init__(detail=detail, status_code=404, error_code="PRODUCT_NOT_FOUND")


class LookupValidationException(PriceScanException):
    """Upstream product data did not match the ProductResponse schema."""

    def __init__(
        self, detail: str = "Invalid data format from API", details: Optional[Any] = None
    ):
        super().__init__(
            detail=detail,
            status_code=422,
            error_code="INVALID_PRODUCT_DATA",
            details=details,
        )


class ExternalAPIException(PriceScanException):
    """External API exception.

    Carries the upstream HTTP status when there was one, 502 otherwise.
    """

    def __init__(
        self,
        detail: str = "External API error",
        service_name: str = "",
        status_code: int = 502,
    ):
        super().__init__(
            detail=f"{service_name}: {detail}" if service_name else detail,
            status_code=status_code,
            error_code="EXTERNAL_API_ERROR",
        )


class ServiceUnavailableException(PriceScanException):
    """A collaborator service is not configured."""

    def __init__(self, detail: str = "Service not configured"):
        super().__init__(
            detail=detail, status_code=503, error_code="SERVICE_UNAVAILABLE"
        )
