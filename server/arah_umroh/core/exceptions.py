"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://arahumroh.com/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_permissions: Optional[list] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_permissions:
            extensions["required_permissions"] = required_permissions

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions = {
            "error_id": error_id,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


# Business logic exceptions

class BusinessRuleError(ProblemDetailsException):
    """Base for domain rule violations carrying a machine-readable code."""

    def __init__(
        self,
        title: str,
        code: str,
        detail: str,
        status_code: int = 409,
        extensions: Optional[Dict[str, Any]] = None,
    ):
        payload = {"code": code, "retryable": False}
        payload.update(extensions or {})
        super().__init__(
            status_code=status_code,
            title=title,
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/{code.lower().replace('_', '-')}",
            extensions=payload,
        )


class InsufficientCreditsError(BusinessRuleError):
    """Raised when a travel does not hold enough credits for a purchase."""

    def __init__(self, travel_id: str, required: int, available: int):
        super().__init__(
            title="Insufficient Credits",
            code="INSUFFICIENT_CREDITS",
            detail=f"Travel {travel_id} needs {required} credits but only has {available}",
            extensions={
                "travel_id": travel_id,
                "required_credits": required,
                "available_credits": available,
            },
        )


class FeaturedLimitError(BusinessRuleError):
    """Raised when a featured placement would exceed a configured limit."""

    def __init__(self, limit_name: str, limit: int, current: int):
        super().__init__(
            title="Featured Limit Reached",
            code="FEATURED_LIMIT_REACHED",
            detail=f"Limit '{limit_name}' of {limit} active placements reached ({current} active)",
            extensions={"limit_name": limit_name, "limit": limit, "current": current},
        )


class InvalidStatusTransitionError(BusinessRuleError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, resource_type: str, current_status: str, requested_status: str, allowed: list[str]):
        super().__init__(
            title="Invalid Status Transition",
            code="INVALID_STATUS_TRANSITION",
            detail=f"Cannot move {resource_type} from '{current_status}' to '{requested_status}'",
            extensions={
                "resource_type": resource_type,
                "current_status": current_status,
                "requested_status": requested_status,
                "allowed_statuses": allowed,
            },
        )


class InsufficientStockError(BusinessRuleError):
    """Raised when an order asks for more units than a product has in stock."""

    def __init__(self, product_id: str, requested_quantity: int, available_quantity: int):
        super().__init__(
            title="Insufficient Stock",
            code="OUT_OF_STOCK",
            detail=(
                f"Requested quantity ({requested_quantity}) exceeds available stock "
                f"({available_quantity}) for product {product_id}"
            ),
            extensions={
                "product_id": product_id,
                "requested_quantity": requested_quantity,
                "available_quantity": available_quantity,
            },
        )


class SeatsUnavailableError(BusinessRuleError):
    """Raised when a departure cannot seat the requested pilgrims."""

    def __init__(self, departure_id: str, requested_seats: int, available_seats: int):
        super().__init__(
            title="Seats Unavailable",
            code="SEATS_UNAVAILABLE",
            detail=(
                f"Departure {departure_id} has insufficient seats. "
                f"Requested: {requested_seats}, Available: {available_seats}"
            ),
            extensions={
                "departure_id": departure_id,
                "requested_seats": requested_seats,
                "available_seats": available_seats,
            },
        )


class PlanLimitError(BusinessRuleError):
    """Raised when an agent exceeds a limit of their membership plan."""

    def __init__(self, plan_id: str, limit_name: str, limit: int):
        super().__init__(
            title="Plan Limit Reached",
            code="PLAN_LIMIT_REACHED",
            detail=f"The '{plan_id}' plan allows at most {limit} ({limit_name})",
            extensions={"plan": plan_id, "limit_name": limit_name, "limit": limit},
        )


class IdempotencyMismatchError(BusinessRuleError):
    """Raised when an idempotency key is reused with a different request body."""

    def __init__(self, idempotency_key: str, method: str):
        super().__init__(
            title="Idempotency Key Mismatch",
            code="IDEMPOTENCY_KEY_MISMATCH",
            detail=(
                f"Idempotency key '{idempotency_key}' was already used for "
                f"'{method}' with a different request body"
            ),
            status_code=422,
            extensions={"idempotency_key": idempotency_key, "method": method},
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI request validation failures to Problem Details with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "The request data failed validation",
            "instance": str(request.url.path),
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"error_id": error_id, "path": request.url.path},
    )

    problem_details = {
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
