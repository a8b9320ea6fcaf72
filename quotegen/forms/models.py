"""
Quotation data model.

Payloads come straight from the browser form as JSON. from_payload() maps
them onto typed, immutable objects; numeric fields go through
parse_or_default so malformed values degrade to 0 instead of raising.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from quotegen.core.numbers import parse_or_default, parse_optional

DEFAULT_TAX_PERCENT = 15.0


def _text(value) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class LineItem:
    name: str = ""
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price

    @property
    def label(self) -> str:
        return f"{self.name} - {self.description}"

    @classmethod
    def from_payload(cls, data) -> "LineItem":
        if not isinstance(data, dict):
            data = {}
        return cls(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            quantity=parse_or_default(data.get("quantity")),
            unit_price=parse_or_default(data.get("unitPrice")),
        )


@dataclass(frozen=True)
class QuotationRequest:
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    quotation_date: Optional[str] = None
    items: Tuple[LineItem, ...] = ()
    discount_percent: float = 0.0
    tax_percent: float = DEFAULT_TAX_PERCENT

    @classmethod
    def from_payload(cls, data: dict,
                     default_tax_percent: float = DEFAULT_TAX_PERCENT) -> "QuotationRequest":
        """Build from the JSON body. 'discount'/'tax' are accepted as aliases
        for 'discountPercent'/'taxPercent' (the keys the form posts)."""
        data = data if isinstance(data, dict) else {}
        discount = data.get("discountPercent", data.get("discount"))
        tax = parse_optional(data.get("taxPercent", data.get("tax")))
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        date = data.get("quotationDate")
        return cls(
            client_name=_text(data.get("clientName")),
            client_email=_text(data.get("clientEmail")),
            client_phone=_text(data.get("clientPhone")),
            quotation_date=_text(date) if date else None,
            items=tuple(LineItem.from_payload(it) for it in raw_items),
            discount_percent=parse_or_default(discount, 0.0),
            tax_percent=default_tax_percent if tax is None else tax,
        )


@dataclass(frozen=True)
class QuotationTotals:
    subtotal: float
    discount_amount: float
    taxable_amount: float
    tax_amount: float
    grand_total: float
    discount_percent: float = 0.0
    tax_percent: float = DEFAULT_TAX_PERCENT

    @property
    def has_discount(self) -> bool:
        return self.discount_percent > 0

    def as_dict(self) -> dict:
        d = asdict(self)
        return {
            "subtotal": d["subtotal"],
            "discountAmount": d["discount_amount"],
            "taxableAmount": d["taxable_amount"],
            "taxAmount": d["tax_amount"],
            "grandTotal": d["grand_total"],
            "discountPercent": d["discount_percent"],
            "taxPercent": d["tax_percent"],
        }
