# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response carries an "error" message and a machine-readable
# "code", plus an optional suggestion telling the caller how to fix it.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class HeatAwardsException(Exception):
    """
    Base exception for the Heat Awards API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "HEAT_AWARDS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions
# =============================================================================

class InvalidSubmissionError(HeatAwardsException):
    """Raised when a request is missing a required field or has a bad value."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="INVALID_SUBMISSION",
            status_code=400,
            details={"field": field} if field else None,
        )


class UnknownCategoryError(HeatAwardsException):
    """Raised when a sauce category is not one of the competition categories."""

    def __init__(self, category: str):
        super().__init__(
            message=f"Unknown sauce category: {category}",
            code="UNKNOWN_CATEGORY",
            status_code=400,
            suggestion="Pick one of the published competition categories",
            details={"category": category},
        )


# =============================================================================
# Authorization Exceptions
# =============================================================================

class NotAuthenticatedError(HeatAwardsException):
    """Raised when an action needs a logged-in user."""

    def __init__(self):
        super().__init__(
            message="You must be logged in to perform this action.",
            code="NOT_AUTHENTICATED",
            status_code=401,
        )


class NotAuthorizedError(HeatAwardsException):
    """Raised when the caller is not allowed to perform an action."""

    def __init__(self, message: str = "You are not authorized to perform this action."):
        super().__init__(
            message=message,
            code="NOT_AUTHORIZED",
            status_code=403,
        )


# =============================================================================
# Intake Exceptions
# =============================================================================

class IntakeStepError(HeatAwardsException):
    """
    Raised when one step of the supplier intake sequence fails.

    The message is prefixed with the step label so operators can tell which
    write was the last one to land. Earlier steps are not rolled back.
    """

    def __init__(self, step: str, error: str):
        super().__init__(
            message=f"{step}: {error}",
            code="INTAKE_STEP_FAILED",
            status_code=400,
            details={"step": step},
        )
        self.step = step


# =============================================================================
# Not Found Exceptions
# =============================================================================

class SauceNotFoundError(HeatAwardsException):
    """Raised when a sauce ID doesn't exist."""

    def __init__(self, sauce_id: str):
        super().__init__(
            message="Sauce not found.",
            code="SAUCE_NOT_FOUND",
            status_code=404,
            details={"sauce_id": sauce_id},
        )


class JudgeNotFoundError(HeatAwardsException):
    """Raised when a judge ID or email doesn't exist."""

    def __init__(self, judge_ref: str):
        super().__init__(
            message=f"Judge not found: {judge_ref}",
            code="JUDGE_NOT_FOUND",
            status_code=404,
            suggestion="Scan a judge QR code before scanning sauces",
            details={"judge": judge_ref},
        )


class PaymentNotFoundError(HeatAwardsException):
    """Raised when a payment quote ID doesn't exist."""

    def __init__(self, payment_id: str):
        super().__init__(
            message="Payment record not found",
            code="PAYMENT_NOT_FOUND",
            status_code=404,
            details={"payment_id": payment_id},
        )


# =============================================================================
# State Exceptions
# =============================================================================

class InvalidStatusTransitionError(HeatAwardsException):
    """Raised when a sauce cannot move to the requested status."""

    def __init__(self, message: str, current: str, target: str | None = None):
        details = {"current_status": current}
        if target:
            details["target_status"] = target
        super().__init__(
            message=message,
            code="INVALID_STATUS_TRANSITION",
            status_code=409,
            details=details,
        )


class ConflictOfInterestError(HeatAwardsException):
    """Raised when a supplier judge would receive their own sauce."""

    def __init__(self, message: str, judge_email: str, sauce_code: str | None):
        super().__init__(
            message=message,
            code="CONFLICT_OF_INTEREST",
            status_code=409,
            details={"judge_email": judge_email, "sauce_code": sauce_code},
        )


class BoxAssignmentError(HeatAwardsException):
    """Raised when a sauce already sits in another judge's box."""

    def __init__(self, sauce_id: str):
        super().__init__(
            message="This sauce is already assigned to a different judge box.",
            code="BOX_ASSIGNMENT_CONFLICT",
            status_code=409,
            details={"sauce_id": sauce_id},
        )


class DuplicateScanError(HeatAwardsException):
    """Raised when the same bottle sticker is scanned twice."""

    def __init__(self, sauce_id: str, bottle_number: int):
        super().__init__(
            message=f"Bottle {bottle_number} of this sauce has already been scanned.",
            code="DUPLICATE_SCAN",
            status_code=409,
            details={"sauce_id": sauce_id, "bottle_number": bottle_number},
        )


class DuplicateScoreError(HeatAwardsException):
    """Raised when a judge submits a score for a sauce they already scored."""

    def __init__(self):
        super().__init__(
            message=(
                "One or more of these sauces have already been scored by you. "
                "Your pending scores have not been cleared."
            ),
            code="DUPLICATE_SCORE",
            status_code=409,
        )


class SauceAlreadyPaidError(HeatAwardsException):
    """Raised when a supplier tries to delete a sauce that has been paid for."""

    def __init__(self, sauce_id: str):
        super().__init__(
            message="Paid sauces cannot be deleted.",
            code="SAUCE_ALREADY_PAID",
            status_code=409,
            details={"sauce_id": sauce_id},
        )


# =============================================================================
# External Dependency Exceptions
# =============================================================================

class PaymentProviderError(HeatAwardsException):
    """Raised when the payment provider rejects or fails a request."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Payment provider error: {error}",
            code="PAYMENT_PROVIDER_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
        )


class WebhookSignatureError(HeatAwardsException):
    """Raised when a webhook payload fails signature verification."""

    def __init__(self, error: str):
        super().__init__(
            message=error,
            code="INVALID_WEBHOOK_SIGNATURE",
            status_code=400,
        )


class StorageMoveError(HeatAwardsException):
    """Raised when an uploaded image cannot be moved to its permanent path."""

    def __init__(self, source: str, error: str):
        super().__init__(
            message=f"Failed to move image {source}: {error}",
            code="STORAGE_MOVE_ERROR",
            status_code=500,
            details={"source": source},
        )


class EmailDeliveryError(HeatAwardsException):
    """Raised when the email API refuses a message."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Email API error: {error}",
            code="EMAIL_DELIVERY_ERROR",
            status_code=502,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def heat_awards_exception_handler(
    request: Request,
    exc: HeatAwardsException
) -> JSONResponse:
    """
    Convert HeatAwardsException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    errors = getattr(exc, "errors", None)
    first = errors()[0] if callable(errors) and errors() else None
    message = first.get("msg", "Validation error") if first else "Validation error"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]

    return JSONResponse(
        status_code=422,
        content={
            "error": message,
            "code": "VALIDATION_ERROR",
            "errors": str(exc),
        }
    )
