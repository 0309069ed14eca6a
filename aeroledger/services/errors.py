"""
Ledger exceptions.

Raised by the services; the flight orchestrators turn them into structured
results at their boundary, the financial approvals let them propagate.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(LedgerError):
    """Submission, flight, deposit, fuel log, aircraft or pilot does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any, message: str | None = None):
        super().__init__(
            message or f"{entity} {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class InvalidStateError(LedgerError):
    """Operation attempted on a record in a terminal or incompatible state."""

    code = "INVALID_STATE"

    def __init__(self, current_state: str, operation: str, message: str | None = None):
        super().__init__(
            message or f"Cannot {operation} while in state {current_state}",
            details={"current_state": current_state, "operation": operation},
        )


class IncompleteDataError(LedgerError):
    """Required numeric fields are missing or NaN."""

    code = "INCOMPLETE_DATA"

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message, details={"fields": fields or []})


class AlreadyApprovedError(LedgerError):
    code = "ALREADY_APPROVED"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} {entity_id} was already approved",
            details={"entity": entity, "id": entity_id},
        )


class ValidationError(LedgerError):
    """Input rejected at submission time (e.g. counters not above the baseline)."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message, details=error_details)
