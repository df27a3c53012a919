"""On-screen preview of a document as a tree of layout nodes.

The tree is what a UI draws and what the image renderer rasterizes, so it
carries the final display strings (labels, formatted money, placeholders)
rather than raw values. Layout hints live in ``style``:

- ``align``: "left" | "center" | "right"
- ``weight``: "normal" | "bold"
- ``size``: font size in logical pixels
- ``color``: hex text color
- ``role``: tags the block a node belongs to (meta, business, party, items,
  totals, notes)
- ``span``: grid columns a table cell occupies, out of 12
- ``background``: row fill
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from invoicegen.documents.models import Document
from invoicegen.render import common
from invoicegen.utils.formatting import format_date, format_money, format_number, format_rate

PRIMARY = "#2563eb"
TEXT = "#111827"
MUTED = "#4b5563"
HINT = "#9ca3af"
HEADER_FILL = "#f3f4f6"
STRIPE_FILL = "#f9fafb"
WHITE = "#ffffff"

# Description / Quantity / Rate / Amount on a 12-column grid
COLUMN_SPANS = (6, 2, 2, 2)
COLUMN_ALIGN = ("left", "center", "center", "right")


@dataclass
class PreviewNode:
    kind: str
    text: str = ""
    style: dict = field(default_factory=dict)
    children: list[PreviewNode] = field(default_factory=list)
    data: bytes | None = None   # image payload for logo nodes

    @property
    def role(self) -> str | None:
        return self.style.get("role")

    def walk(self) -> Iterator[PreviewNode]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, kind: str | None = None, role: str | None = None) -> list[PreviewNode]:
        return [
            node for node in self.walk()
            if (kind is None or node.kind == kind) and (role is None or node.role == role)
        ]

    def find(self, kind: str | None = None, role: str | None = None) -> PreviewNode | None:
        found = self.find_all(kind, role)
        return found[0] if found else None

    def text_content(self) -> str:
        return "\n".join(node.text for node in self.walk() if node.text)


def _line(text: str, **style) -> PreviewNode:
    return PreviewNode("line", text, style)


def _meta_block(document: Document) -> PreviewNode:
    doc_type = document.document_type
    lines = [
        _line(f"{common.document_label(doc_type)} #: {document.document_number or 'XXX'}", size=14),
        _line(
            f"{common.date_issued_label(doc_type)} "
            f"{format_date(document.date_issued, common.DATE_PLACEHOLDER)}",
            size=14,
        ),
    ]
    due_label = common.due_date_label(doc_type)
    if due_label and document.visible_due_date:
        lines.append(_line(f"{due_label} {format_date(document.visible_due_date)}", size=14))
    return PreviewNode("column", style={"role": "meta"}, children=lines)


def _business_block(document: Document) -> PreviewNode:
    children = []
    if document.business.logo:
        children.append(PreviewNode(
            "logo", style={"align": "right", "width": 160, "height": 80},
            data=common.decode_logo(document.business.logo),
        ))
    children.append(_line(
        document.business.name or common.BUSINESS_PLACEHOLDER,
        align="right", weight="bold", size=18,
    ))
    for text in common.business_lines(document):
        children.append(_line(text, align="right", size=14, color=MUTED))
    return PreviewNode("column", style={"role": "business", "align": "right"}, children=children)


def _party_block(document: Document) -> PreviewNode:
    children = [
        PreviewNode("heading", common.party_label(document.document_type), {"weight": "bold", "size": 18}),
        _line(document.client.name or common.CLIENT_PLACEHOLDER, weight="bold", size=14),
    ]
    children.extend(_line(text, size=14) for text in common.party_lines(document))
    return PreviewNode("column", style={"role": "party"}, children=children)


def _cell(text: str, index: int, **style) -> PreviewNode:
    return PreviewNode("cell", text, {
        "span": COLUMN_SPANS[index], "align": COLUMN_ALIGN[index], "size": 14, **style,
    })


def _items_table(document: Document) -> PreviewNode:
    header = PreviewNode(
        "row", style={"background": HEADER_FILL, "header": True},
        children=[_cell(h, i, weight="bold") for i, h in enumerate(common.TABLE_HEADERS)],
    )
    rows = [header]
    for index, item in enumerate(document.line_items):
        values = [
            item.description or common.ITEM_PLACEHOLDER,
            format_number(item.quantity),
            format_money(item.rate),
            format_money(item.amount),
        ]
        cells = [_cell(v, i) for i, v in enumerate(values)]
        cells[3].style["weight"] = "bold"
        rows.append(PreviewNode(
            "row", style={"background": WHITE if index % 2 == 0 else STRIPE_FILL}, children=cells,
        ))
    return PreviewNode("table", style={"role": "items"}, children=rows)


def _totals_row(label: str, amount: float, **style) -> PreviewNode:
    return PreviewNode("row", style=style, children=[
        PreviewNode("cell", label, {"align": "left", **style}),
        PreviewNode("cell", format_money(amount), {"align": "right", **style}),
    ])


def _totals_block(document: Document) -> PreviewNode:
    totals = document.totals
    rows = [_totals_row("Subtotal:", totals.subtotal, size=16)]
    if document.vat_rate > 0:
        rows.append(_totals_row(f"VAT ({format_rate(document.vat_rate)}%):", totals.vat_amount, size=16))
    rows.append(PreviewNode("separator"))
    rows.append(_totals_row("Total:", totals.total, size=18, weight="bold", emphasis=True))
    return PreviewNode("totals", style={"role": "totals", "align": "right", "width": 256}, children=rows)


def _notes_block(document: Document) -> PreviewNode:
    if document.notes:
        return PreviewNode("notes", style={"role": "notes"}, children=[
            PreviewNode("heading", "Notes:", {"weight": "bold", "size": 16}),
            PreviewNode("line", document.notes, {"size": 14, "color": MUTED, "wrap": True}),
        ])
    return PreviewNode("notes", style={"role": "notes"}, children=[
        PreviewNode("hint", common.NOTES_HINT, {"size": 12, "color": HINT, "italic": True}),
    ])


def build_preview(document: Document) -> PreviewNode:
    """Lay out a document the way the on-screen preview shows it."""
    left = PreviewNode("column", children=[
        PreviewNode("title", common.document_title(document.document_type),
                    {"weight": "bold", "size": 30, "color": PRIMARY}),
        _meta_block(document),
    ])
    header = PreviewNode("header", children=[left, _business_block(document)])

    return PreviewNode("document", style={"background": WHITE, "color": TEXT}, children=[
        header,
        PreviewNode("separator"),
        _party_block(document),
        _items_table(document),
        _totals_block(document),
        PreviewNode("separator"),
        _notes_block(document),
    ])
