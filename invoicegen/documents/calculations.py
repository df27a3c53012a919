"""Line-item arithmetic and document totals."""

from __future__ import annotations

import re
import time
import uuid
from dataclasses import replace

import config
from invoicegen.documents.models import LineItem, Totals

EDITABLE_FIELDS = ("description", "quantity", "rate")
_LEADING_INT = re.compile(r"\s*(\d+)")


def new_id() -> str:
    """Time-ordered id shared by line items and saved records."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def blank_line_item() -> LineItem:
    return LineItem(id=new_id(), description="", quantity=1, rate=0, amount=0)


def recompute_line_item(item: LineItem, changed_field: str, new_value) -> LineItem:
    """Return a copy of item with one field changed.

    Changing quantity or rate recomputes amount from the updated values.
    amount itself is derived and cannot be set.
    """
    if changed_field not in EDITABLE_FIELDS:
        raise ValueError(f"Line item field '{changed_field}' is not editable")

    updated = replace(item, **{changed_field: new_value})
    if changed_field in ("quantity", "rate"):
        updated.amount = updated.quantity * updated.rate
    return updated


def compute_totals(line_items: list[LineItem], vat_rate: float) -> Totals:
    """Subtotal, VAT and total. vat_rate is a percentage and is not clamped."""
    subtotal = sum(item.amount for item in line_items)
    vat_amount = subtotal * (vat_rate / 100)
    return Totals(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)


def add_line_item(items: list[LineItem]) -> list[LineItem]:
    return [*items, blank_line_item()]


def remove_line_item(items: list[LineItem], item_id: str) -> list[LineItem]:
    remaining = [item for item in items if item.id != item_id]
    # A document always shows at least one row
    return remaining or [blank_line_item()]


def update_line_item(items: list[LineItem], item_id: str, changed_field: str, new_value) -> list[LineItem]:
    return [
        recompute_line_item(item, changed_field, new_value) if item.id == item_id else item
        for item in items
    ]


def next_document_number(current: str, width: int | None = None) -> str:
    """Increment a document number, keeping the zero padding: "009" -> "010".

    Numbers without a leading integer restart at 1.
    """
    width = config.DOCUMENT_NUMBER_WIDTH if width is None else width
    match = _LEADING_INT.match(current or "")
    value = int(match.group(1)) if match else 0
    return str(value + 1).zfill(width)
