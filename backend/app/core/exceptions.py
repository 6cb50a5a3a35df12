"""
Error taxonomy for the inventory core and its HTTP translation.

Domain errors (InventoryError subclasses) are raised by the services and
carry operator-facing messages. Routes translate them into HTTPExceptions
through BusinessError, which logs store faults internally with full detail.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base exception for inventory workflow failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LookupNotFound(InventoryError):
    """Token matched no unit."""

    def __init__(self, identifier: str):
        super().__init__("Daana ID not found.")
        self.identifier = identifier


class InvalidQuantity(InventoryError):
    """Requested quantity is not a positive integer."""

    def __init__(self, requested):
        super().__init__("Quantity must be greater than 0.")
        self.requested = requested


class UnitNotDispensable(InventoryError):
    """Unit is in a terminal status."""

    def __init__(self, unit_status: str):
        super().__init__(f"Cannot dispense. Unit status is: {unit_status}.")
        self.status = unit_status


class InsufficientQuantity(InventoryError):
    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Cannot dispense. Requested {requested}, but only {available} available."
        )
        self.available = available
        self.requested = requested


class CommitFailed(InventoryError):
    """Store fault during the atomic write. Nothing was applied."""

    def __init__(self, cause: Exception):
        super().__init__(f"Could not dispense item: {cause}")
        self.cause = cause


VALIDATION_ERRORS = (InvalidQuantity, UnitNotDispensable, InsufficientQuantity)


class BusinessError:
    """Business-domain HTTP errors with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", detail: str = "Resource not found") -> HTTPException:
        logger.info(f"Not found: {resource}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business logic errors.

        OK to include specific details here since the operator caused the issue.
        Examples: "Quantity must be greater than 0.", "Cannot dispense. Unit status is: expired."
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail) -> HTTPException:
        """
        409 for requests that need explicit operator confirmation.
        Example: FEFO advisory on an out-of-order dispense.
        """
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None, detail: str = None) -> HTTPException:
        """
        500 - logs the actual error internally.

        `detail` lets callers pass a support-facing message; otherwise the
        response stays generic.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail or "An internal error occurred. Please try again later.",
        )

    @staticmethod
    def from_inventory_error(error: InventoryError) -> HTTPException:
        """Map a domain error to its HTTP response."""
        if isinstance(error, LookupNotFound):
            return BusinessError.not_found(f"unit {error.identifier}", detail=error.message)
        if isinstance(error, VALIDATION_ERRORS):
            return BusinessError.bad_request(error.message)
        if isinstance(error, CommitFailed):
            return BusinessError.server_error(error.cause, detail=error.message)
        return BusinessError.server_error(error)
