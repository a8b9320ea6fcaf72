"""
Request validation — runs before any totals or rendering.

Only the identity fields the document can't do without and a non-empty
item list are required. Everything else (phone, date, rates) is optional
and degrades inside the calculator/renderer.
"""


class QuotationValidationError(ValueError):
    """Payload rejected before computation. str(e) is safe to show users."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.message = message
        self.field = field


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def validate_quotation(payload) -> dict:
    """Return payload unchanged if acceptable, else raise QuotationValidationError."""
    if not isinstance(payload, dict):
        raise QuotationValidationError("Request body must be a JSON object")
    if _blank(payload.get("clientName")):
        raise QuotationValidationError("Please enter client name", "clientName")
    if _blank(payload.get("clientEmail")):
        raise QuotationValidationError("Please enter a valid email address", "clientEmail")
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise QuotationValidationError("Please add at least one product/service", "items")
    return payload
