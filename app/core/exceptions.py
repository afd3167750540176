"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidBookingStatus(AppException):
    """Invalid booking status for operation."""

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class MixedCurrencyError(ValidationError):
    """A payout batch contains bookings in more than one currency."""

    def __init__(self, currencies: set[str]) -> None:
        self.currencies = currencies
        listed = ", ".join(sorted(currencies))
        super().__init__(f"Payout batch mixes currencies: {listed}")


class PricingRuleLookupError(Exception):
    """Pricing rule lookup failed.

    Returned alongside a missing rate rather than raised, so the caller
    chooses the fallback rate.
    """

    def __init__(self, service_category: str | None, city: str | None, cause: Exception) -> None:
        self.service_category = service_category
        self.city = city
        self.cause = cause
        super().__init__(
            f"Pricing rule lookup failed for category={service_category!r} city={city!r}: {cause}"
        )
