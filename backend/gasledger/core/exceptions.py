"""
Exception handling for the sales and stock APIs.

Services raise the domain exceptions below; routes translate them into
HTTPExceptions through BusinessError. Every error body is rendered as
{"error": ...} by `http_exception_handler`, and schema validation failures
by `validation_exception_handler`.
"""
import logging
import traceback

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gasledger.core.config import settings

logger = logging.getLogger(__name__)


class SaleError(Exception):
    """Base class for errors raised while creating a sale."""


class ValidationFailed(SaleError):
    pass


class CustomerNotFound(SaleError):
    def __init__(self, customer_id):
        super().__init__("Customer not found")
        self.customer_id = customer_id


class ProductNotFound(SaleError):
    def __init__(self, product_id=None, message: str = "One or more products not found"):
        super().__init__(message)
        self.product_id = product_id


class InsufficientStock(SaleError):
    """Requested quantity exceeds what the category-specific counter holds."""

    def __init__(self, product_name: str, stock_type: str, available: int, required: int):
        self.product_name = product_name
        self.stock_type = stock_type
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient {stock_type} for {product_name}. "
            f"Available: {available}, Required: {required}"
        )


class InvoiceNumberExhausted(SaleError):
    def __init__(self, attempts: int, cause: Exception | None = None):
        message = f"Failed to save sale after {attempts} attempts"
        if cause is not None:
            message = f"{message}: {getattr(cause, 'orig', cause)}"
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


class AssignmentNotFound(Exception):
    pass


class BusinessError:
    """Business-domain HTTP errors."""

    @staticmethod
    def not_found(detail: str = "Resource not found", reason: str = "") -> HTTPException:
        if reason:
            logger.warning(f"Not found: {detail} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business logic errors.

        OK to include specific details here since the caller caused the issue.
        Examples: "Missing required fields", "Insufficient Gas for ..."
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def server_error(message: str, original_error: Exception | None = None) -> HTTPException:
        """
        500 carrying the underlying cause.

        `details` always holds the error message; `stack` is only attached
        outside production.
        """
        body = {"error": message}
        if original_error is not None:
            logger.error(
                f"{message}: {type(original_error).__name__}: {original_error}",
                exc_info=original_error,
            )
            body["details"] = str(original_error)
            if settings.ENVIRONMENT != "production":
                body["stack"] = "".join(
                    traceback.format_exception(
                        type(original_error), original_error, original_error.__traceback__
                    )
                )
        else:
            logger.error(message)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=body,
        )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query params are client errors: 400 {"error": ...}."""
    errors = exc.errors()
    if any(err.get("type") == "missing" for err in errors):
        message = "Missing required fields"
    else:
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"Invalid value for {field}: {first.get('msg', 'invalid input')}"
    logger.info(f"Bad request: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})
