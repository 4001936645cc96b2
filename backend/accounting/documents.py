# accounting/documents.py
"""
Pricing of document lines shared by sales and purchase documents.

A priced line is a dict matching the fields of accounting.models.DocumentLine
(plus ``product`` for sales lines), ready for bulk_create.
"""

from decimal import Decimal

from accounting.amounts import money, to_decimal
from tax.vat import document_totals, line_totals

ONE = Decimal("1")


def price_line(idx: int, item: dict, default_rate, product=None):
    """
    Returns (line, error).

    A missing unit price falls back to the product's price; a missing
    rate to ``default_rate``.
    """
    quantity = to_decimal(item.get("quantity"), default=ONE)
    if quantity <= 0:
        return None, f"Line {idx}: quantity must be greater than zero."

    raw_price = item.get("unit_price")
    if raw_price in (None, "") and product is not None:
        unit_price = product.unit_price
    else:
        unit_price = money(raw_price)
    if unit_price < 0:
        return None, f"Line {idx}: unit price cannot be negative."

    raw_rate = item.get("tax_rate")
    rate = to_decimal(default_rate) if raw_rate in (None, "") else to_decimal(raw_rate)
    if rate < 0 or rate > 100:
        return None, f"Line {idx}: tax rate must be between 0 and 100."

    totals = line_totals(quantity, unit_price, rate)
    description = (item.get("description") or "").strip() or (product.name if product else "")
    if not description:
        return None, f"Line {idx}: description is required."

    return {
        "line_no": idx,
        "description": description,
        "quantity": quantity,
        "unit_price": unit_price,
        "tax_rate": rate,
        "amount": totals.amount,
        "tax_amount": totals.tax,
    }, None


def totals_for(lines):
    return document_totals(
        line_totals(line["quantity"], line["unit_price"], line["tax_rate"]) for line in lines
    )


def write_items(model, parent_field: str, parent, lines):
    model.objects.bulk_create([model(**{parent_field: parent}, **line) for line in lines])
