"""Error kinds raised by the services and translated to HTTP at the boundary."""
import logging
from typing import List, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "An error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.errors = errors or [self.message]
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class AuthError(AppError):
    status_code = 401
    default_message = "Authentication required"


class UnauthorizedError(AuthError):
    status_code = 401
    default_message = "Authentication required. Please provide authorization token."


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Admin role required"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Record not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Record already exists"


class BusinessRuleError(AppError):
    status_code = 400
    default_message = "Request violates a business rule"


class InsufficientStockError(BusinessRuleError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


class StoreUnavailableError(AppError):
    status_code = 503
    default_message = "Database connection failed. Please try again later."


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


def _conflict_message(exc: IntegrityError) -> str:
    text = str(exc.orig).lower()
    if "username" in text:
        return "Username already exists"
    if "email" in text:
        return "Email already exists"
    return "Record already exists"


def from_db_error(exc: SQLAlchemyError) -> AppError:
    """Map a SQLAlchemy failure onto the error taxonomy."""
    if isinstance(exc, IntegrityError):
        text = str(exc.orig).lower()
        if "unique" in text or "duplicate" in text:
            return ConflictError(_conflict_message(exc))
        if "foreign key" in text:
            return ConflictError("Record is referenced by other records")
        logger.error("Integrity error: %s", exc.orig)
        return InternalError("Database operation failed")
    if isinstance(exc, OperationalError) or (isinstance(exc, DBAPIError) and exc.connection_invalidated):
        logger.warning("Store unavailable: %s", exc)
        return StoreUnavailableError()
    logger.error("Database error: %s", exc)
    return InternalError("Database operation failed")
