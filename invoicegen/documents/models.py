"""Data models for billing documents."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum


class DocumentType(str, Enum):
    INVOICE = "invoice"
    QUOTATION = "quotation"
    RECEIPT = "receipt"

    @property
    def has_due_date(self) -> bool:
        return self is not DocumentType.RECEIPT


@dataclass
class BusinessProfile:
    name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    tax_id: str = ""
    logo: str = ""           # data URL ("data:image/png;base64,...") or empty

    def to_dict(self) -> dict:
        return {
            "name": self.name, "address": self.address, "city": self.city,
            "postalCode": self.postal_code, "phone": self.phone, "email": self.email,
            "website": self.website, "taxId": self.tax_id, "logo": self.logo,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> BusinessProfile:
        data = data or {}
        return cls(
            name=data.get("name") or "",
            address=data.get("address") or "",
            city=data.get("city") or "",
            postal_code=data.get("postalCode") or "",
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            website=data.get("website") or "",
            tax_id=data.get("taxId") or "",
            logo=data.get("logo") or "",
        )


@dataclass
class PartyInfo:
    name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    email: str = ""
    phone: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name, "address": self.address, "city": self.city,
            "postalCode": self.postal_code, "email": self.email, "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> PartyInfo:
        data = data or {}
        return cls(
            name=data.get("name") or "",
            address=data.get("address") or "",
            city=data.get("city") or "",
            postal_code=data.get("postalCode") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
        )


@dataclass
class LineItem:
    id: str
    description: str = ""
    quantity: float = 1
    rate: float = 0
    amount: float = 0        # always quantity * rate, see calculations.recompute_line_item

    def to_dict(self) -> dict:
        return {
            "id": self.id, "description": self.description,
            "quantity": self.quantity, "rate": self.rate, "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        quantity = data.get("quantity") or 0
        rate = data.get("rate") or 0
        return cls(
            id=str(data["id"]),
            description=data.get("description") or "",
            quantity=quantity,
            rate=rate,
            amount=quantity * rate,
        )


@dataclass(frozen=True)
class Totals:
    subtotal: float
    vat_amount: float
    total: float


@dataclass
class Document:
    document_type: DocumentType
    business: BusinessProfile
    client: PartyInfo
    line_items: list[LineItem]
    document_number: str
    date_issued: str          # YYYY-MM-DD
    due_date: str = ""        # YYYY-MM-DD or empty; never shown on receipts
    notes: str = ""
    vat_rate: float = 0.0

    @property
    def totals(self) -> Totals:
        from invoicegen.documents.calculations import compute_totals
        return compute_totals(self.line_items, self.vat_rate)

    @property
    def visible_due_date(self) -> str:
        return self.due_date if self.document_type.has_due_date else ""

    def snapshot(self) -> Document:
        """Independent deep copy, safe to hand to storage or a renderer."""
        return copy.deepcopy(self)

    @classmethod
    def blank(cls, business: BusinessProfile, document_number: str, today: str,
              document_type: DocumentType = DocumentType.INVOICE) -> Document:
        from invoicegen.documents.calculations import blank_line_item
        return cls(
            document_type=document_type,
            business=business,
            client=PartyInfo(),
            line_items=[blank_line_item()],
            document_number=document_number,
            date_issued=today,
        )

    def to_dict(self) -> dict:
        totals = self.totals
        return {
            "documentType": self.document_type.value,
            "businessInfo": self.business.to_dict(),
            "clientInfo": self.client.to_dict(),
            "lineItems": [item.to_dict() for item in self.line_items],
            "documentNumber": self.document_number,
            "dateIssued": self.date_issued,
            "dueDate": self.due_date,
            "notes": self.notes,
            "vatRate": self.vat_rate,
            # Derived, written for readers of the raw blob; ignored by from_dict
            "subtotal": totals.subtotal,
            "vatAmount": totals.vat_amount,
            "total": totals.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Document:
        from invoicegen.documents.calculations import blank_line_item
        items = [LineItem.from_dict(i) for i in data.get("lineItems") or []]
        return cls(
            document_type=DocumentType(data["documentType"]),
            business=BusinessProfile.from_dict(data.get("businessInfo")),
            client=PartyInfo.from_dict(data.get("clientInfo")),
            line_items=items or [blank_line_item()],
            document_number=data.get("documentNumber") or "",
            date_issued=data.get("dateIssued") or "",
            due_date=data.get("dueDate") or "",
            notes=data.get("notes") or "",
            vat_rate=data.get("vatRate") or 0.0,
        )


@dataclass
class SavedDocumentRecord:
    id: str
    type: DocumentType
    document_number: str
    client_name: str
    total: float
    date_created: str         # ISO-8601, set once on create
    document: Document = field(repr=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "documentNumber": self.document_number,
            "clientName": self.client_name,
            "total": self.total,
            "dateCreated": self.date_created,
            "documentData": self.document.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> SavedDocumentRecord:
        return cls(
            id=str(data["id"]),
            type=DocumentType(data["type"]),
            document_number=data.get("documentNumber") or "",
            client_name=data.get("clientName") or "",
            total=data.get("total") or 0.0,
            date_created=data["dateCreated"],
            document=Document.from_dict(data["documentData"]),
        )
