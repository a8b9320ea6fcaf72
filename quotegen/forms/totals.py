"""
Quotation totals — the arithmetic behind every preview and PDF.

    subtotal       = Σ quantity × unit price
    discount       = subtotal × discount% / 100   (only when discount% > 0)
    taxable        = subtotal − discount
    tax            = taxable × tax% / 100          (tax% defaults to 15)
    grand total    = taxable + tax

Never raises: items and rates may be raw payload values and are coerced
with parse_or_default at this boundary.
"""

from typing import Iterable, List, Tuple

from quotegen.core.numbers import (parse_or_default, parse_optional,
                                   format_currency, format_number)
from quotegen.forms.models import LineItem, QuotationTotals, DEFAULT_TAX_PERCENT


def _as_item(item) -> LineItem:
    return item if isinstance(item, LineItem) else LineItem.from_payload(item)


def line_total(item) -> float:
    """quantity × unit price for a LineItem or a raw payload dict."""
    return _as_item(item).total


def compute_totals(items: Iterable, discount_percent=0,
                   tax_percent=DEFAULT_TAX_PERCENT) -> QuotationTotals:
    """Compute the financial summary for a list of line items."""
    subtotal = sum((line_total(it) for it in (items or ())), 0.0)

    discount_pct = parse_or_default(discount_percent, 0.0)
    tax_pct = parse_optional(tax_percent)
    if tax_pct is None:
        tax_pct = DEFAULT_TAX_PERCENT

    discount_amount = subtotal * (discount_pct / 100) if discount_pct > 0 else 0.0
    taxable = subtotal - discount_amount
    tax_amount = taxable * (tax_pct / 100)

    return QuotationTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable,
        tax_amount=tax_amount,
        grand_total=taxable + tax_amount,
        discount_percent=discount_pct,
        tax_percent=tax_pct,
    )


def totals_for_request(request) -> QuotationTotals:
    return compute_totals(request.items, request.discount_percent, request.tax_percent)


def totals_rows(totals: QuotationTotals) -> List[Tuple[str, str, bool]]:
    """Display rows (label, value, emphasized) in print order.

    The discount row is left out entirely when there is no discount.
    """
    rows = [("Subtotal:", format_currency(totals.subtotal), False)]
    if totals.has_discount:
        rows.append((f"Discount ({format_number(totals.discount_percent)}%):",
                     "-" + format_currency(totals.discount_amount), False))
    rows.append((f"Tax ({format_number(totals.tax_percent)}%):",
                 format_currency(totals.tax_amount), False))
    rows.append(("GRAND TOTAL:", format_currency(totals.grand_total), True))
    return rows


def formatted(totals: QuotationTotals) -> dict:
    """Preview payload for the form — same strings the PDF prints."""
    return {
        "subtotal": format_currency(totals.subtotal),
        "discountAmount": ("-" + format_currency(totals.discount_amount)
                           if totals.has_discount else None),
        "taxAmount": format_currency(totals.tax_amount),
        "grandTotal": format_currency(totals.grand_total),
        "rows": [{"label": lbl, "value": val, "emphasized": emph}
                 for lbl, val, emph in totals_rows(totals)],
    }
