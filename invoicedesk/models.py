"""Invoice data models."""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from invoicedesk import config

_CENT = Decimal("0.01")


def round2(value: float) -> float:
    """Round half away from zero to two decimals.

    Operates on the exact binary value of the float, so ``1.005`` (stored
    as 1.00499...) becomes ``1.0`` while ``0.225`` (0.22500...06) becomes
    ``0.23``.
    """
    try:
        quantized = Decimal(float(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, OverflowError):
        return 0.0
    return float(quantized)


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default`` when it is not one."""
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def format_currency(amount: float, symbol: str = "") -> str:
    """Return amount formatted to two decimals, prefixed with ``symbol``."""
    return f"{symbol}{amount:.2f}"


def today_iso() -> str:
    # local calendar date, not UTC
    return datetime.date.today().isoformat()


class InvoiceStatus(str, Enum):
    OPEN = "open"
    PAID = "paid"
    OVERDUE = "overdue"

    @classmethod
    def parse(cls, value: Any) -> "InvoiceStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OPEN


@dataclass(frozen=True)
class Party:
    """Issuer or recipient block printed on an invoice."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Party":
        if isinstance(data, Party):
            return data
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            name=_text(data.get("name")),
            address=_text(data.get("address")),
            phone=_text(data.get("phone")),
            email=_text(data.get("email")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
        }


@dataclass(frozen=True)
class InvoiceItem:
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0

    @property
    def line_total(self) -> float:
        return round2(self.quantity * self.unit_price)

    @classmethod
    def from_dict(cls, data: Any) -> "InvoiceItem":
        if isinstance(data, InvoiceItem):
            return data
        if not isinstance(data, Mapping):
            data = {}
        unit_price = data.get("unitPrice", data.get("unit_price"))
        return cls(
            description=_text(data.get("description")),
            quantity=coerce_number(data.get("quantity"), default=1.0),
            unit_price=coerce_number(unit_price, default=0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }


@dataclass(frozen=True)
class Invoice:
    """An invoice and its derived totals.

    Totals are always computed from ``items`` and ``tax_rate``; persisted
    totals are written for fast listing but never read back.
    """

    id: Optional[str] = None
    invoice_number: str = ""
    date: str = field(default_factory=today_iso)
    from_party: Party = field(default_factory=Party)
    bill_to: Party = field(default_factory=Party)
    items: Tuple[InvoiceItem, ...] = ()
    notes: str = ""
    tax_rate: float = 0.0
    currency: str = config.DEFAULT_CURRENCY
    status: InvoiceStatus = InvoiceStatus.OPEN

    @property
    def sub_total(self) -> float:
        return round2(sum(item.line_total for item in self.items))

    @property
    def tax_amount(self) -> float:
        return round2(self.sub_total * self.tax_rate / 100)

    @property
    def total(self) -> float:
        return round2(self.sub_total + self.tax_amount)

    def total_qty(self) -> float:
        return sum(item.quantity for item in self.items)

    def with_id(self, invoice_id: Optional[str]) -> "Invoice":
        return replace(self, id=invoice_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], invoice_id: Optional[str] = None) -> "Invoice":
        """Build a normalised invoice from its persisted (camelCase) form."""
        raw_items = data.get("items") or []
        if not isinstance(raw_items, (list, tuple)):
            raw_items = []
        raw_id = invoice_id if invoice_id is not None else data.get("id")
        return cls(
            id=str(raw_id) if raw_id not in (None, "") else None,
            invoice_number=_text(data.get("invoiceNumber", data.get("invoice_number"))),
            date=_text(data.get("date")) or today_iso(),
            from_party=Party.from_dict(data.get("from", data.get("from_party"))),
            bill_to=Party.from_dict(data.get("billTo", data.get("bill_to"))),
            items=tuple(InvoiceItem.from_dict(item) for item in raw_items),
            notes=_text(data.get("notes")),
            tax_rate=coerce_number(data.get("taxRate", data.get("tax_rate")), default=0.0),
            currency=_text(data.get("currency")) or config.DEFAULT_CURRENCY,
            status=InvoiceStatus.parse(data.get("status")),
        )

    @classmethod
    def coerce(cls, value: Any) -> "Invoice":
        """Accept an :class:`Invoice` or a mapping and return a normalised invoice."""
        if isinstance(value, Invoice):
            return cls.from_dict(value.to_dict())
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        raise TypeError(f"Cannot build an invoice from {type(value).__name__}")

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if include_id:
            payload["id"] = self.id
        payload.update(
            {
                "invoiceNumber": self.invoice_number,
                "date": self.date,
                "from": self.from_party.to_dict(),
                "billTo": self.bill_to.to_dict(),
                "items": [item.to_dict() for item in self.items],
                "notes": self.notes,
                "taxRate": self.tax_rate,
                "currency": self.currency,
                "status": self.status.value,
                "subTotal": self.sub_total,
                "taxAmount": self.tax_amount,
                "total": self.total,
            }
        )
        return payload


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
