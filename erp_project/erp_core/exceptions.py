from django.core.exceptions import ObjectDoesNotExist, ValidationError


class ErpError(Exception):
    """Base class for typed failures returned to callers.

    Carries a machine readable ``kind``, a human message and the
    identifiers of the records involved.
    """

    kind = "error"

    def __init__(self, message, **identifiers):
        super().__init__(message)
        self.message = message
        self.identifiers = identifiers

    def as_dict(self):
        return {
            "kind": self.kind,
            "message": self.message,
            "identifiers": {k: _plain(v) for k, v in self.identifiers.items()},
        }


class InvalidTransitionError(ErpError):
    """Raised when an operation is attempted from a disallowed status."""

    kind = "invalid_transition"


class InsufficientStockError(ErpError):
    """Raised when a stock-out would take a product below zero."""

    kind = "insufficient_stock"


class UnbalancedEntryError(ErpError):
    """Raised when a JournalEntry fails the double-entry balance check."""

    kind = "unbalanced_entry"


class ReferentialIntegrityError(ErpError):
    """Raised when a referenced record is missing, inactive or still in use."""

    kind = "referential_integrity"


class InvalidAccountError(ReferentialIntegrityError):
    """Raised when a posting references an unknown or inactive account."""

    kind = "invalid_account"


def _plain(value):
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    return str(value)


def error_result(exc):
    """Structured result (kind + message + identifiers) for any core failure."""
    if isinstance(exc, ErpError):
        return exc.as_dict()
    if isinstance(exc, ValidationError):
        result = {"kind": "validation", "message": "; ".join(exc.messages), "identifiers": {}}
        if hasattr(exc, "error_dict"):
            result["fields"] = {
                field: [str(m) for e in errors for m in e.messages]
                for field, errors in exc.error_dict.items()
            }
        return result
    if isinstance(exc, ObjectDoesNotExist):
        return {"kind": "not_found", "message": str(exc), "identifiers": {}}
    raise TypeError(f"Unsupported error type: {type(exc).__name__}")
