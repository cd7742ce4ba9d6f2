"""One-file-per-invoice repository."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from invoicedesk import config
from invoicedesk.models import Invoice, InvoiceStatus, today_iso
from invoicedesk.slug import derive_identifier

LOGGER = logging.getLogger("invoicedesk.data.invoice_repo")

SUMMARY_SEARCH_FIELDS = ("invoiceNumber", "date")


class InvoiceNotFoundError(FileNotFoundError):
    """Raised when no record file exists for an invoice id."""

    def __init__(self, invoice_id: str) -> None:
        super().__init__(f"Invoice '{invoice_id}' not found.")
        self.invoice_id = invoice_id


class InvoiceRepository:
    """Stores each invoice as ``<id>.json`` inside one folder."""

    def __init__(self, directory: Path | str) -> None:
        self.directory: Path = Path(directory)

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, invoice_id: str) -> Path:
        invoice_id = str(invoice_id)
        if invoice_id in ("", ".", "..") or Path(invoice_id).name != invoice_id or "\\" in invoice_id:
            raise ValueError(f"Invalid invoice id: {invoice_id!r}")
        return self.directory / f"{invoice_id}.json"

    def exists(self, invoice_id: str) -> bool:
        return self._path_for(invoice_id).exists()

    def list(self, query: str = "", status: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return summaries ordered by date, newest first.

        ``status`` keeps only invoices in that state; ``None``, ``""`` and
        ``"all"`` keep everything. An unknown status raises ``ValueError``.

        A record that cannot be parsed is listed under its file name with
        zero totals instead of failing the whole listing.
        """
        self._ensure_dir()
        summaries = [self._summarize(path) for path in sorted(self.directory.glob("*.json"))]
        if query:
            needle = query.lower()
            summaries = [item for item in summaries if self._matches(item, needle)]
        if status not in (None, "", "all"):
            wanted = InvoiceStatus(str(status).strip().lower())
            summaries = [item for item in summaries if InvoiceStatus.parse(item["status"]) is wanted]
        return sorted(summaries, key=lambda item: str(item.get("date") or ""), reverse=True)

    def _summarize(self, path: Path) -> Dict[str, Any]:
        invoice_id = path.stem
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("record is not a JSON object")
        except (OSError, ValueError) as exc:
            LOGGER.warning("Corrupt invoice record %s: %s", path, exc)
            return {
                "id": invoice_id,
                "invoiceNumber": invoice_id,
                "date": "",
                "billTo": {"name": ""},
                "total": 0,
                "currency": config.DEFAULT_CURRENCY,
                "status": InvoiceStatus.OPEN.value,
            }
        return {
            "id": invoice_id,
            "invoiceNumber": data.get("invoiceNumber"),
            "date": data.get("date"),
            "billTo": data.get("billTo"),
            "total": data.get("total"),
            "currency": data.get("currency"),
            "status": data.get("status") or InvoiceStatus.OPEN.value,
        }

    @staticmethod
    def _matches(summary: Mapping[str, Any], needle: str) -> bool:
        values = [summary.get(name) for name in SUMMARY_SEARCH_FIELDS]
        bill_to = summary.get("billTo")
        if isinstance(bill_to, Mapping):
            values.append(bill_to.get("name"))
        return any(needle in str(value).lower() for value in values if value)

    def load(self, invoice_id: str) -> Invoice:
        """Read one invoice, recomputing its totals from the stored items."""
        path = self._path_for(invoice_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise InvoiceNotFoundError(invoice_id) from None
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Invoice record {path} is not a JSON object.")
        return Invoice.from_dict(data, invoice_id=invoice_id)

    def save(self, invoice: Union[Invoice, Mapping[str, Any]]) -> Invoice:
        """Persist ``invoice`` and return it with its id and fresh totals."""
        invoice = Invoice.coerce(invoice)
        invoice_id = invoice.id or self._new_id(invoice.invoice_number)
        invoice = invoice.with_id(invoice_id)
        path = self._path_for(invoice_id)
        self._ensure_dir()
        path.write_text(
            json.dumps(invoice.to_dict(include_id=False), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        LOGGER.debug("Saved invoice %s to %s", invoice_id, path)
        return invoice

    def _new_id(self, invoice_number: str) -> str:
        base = derive_identifier(invoice_number, prefix="invoice")
        candidate = base
        suffix = 2
        while self._path_for(candidate).exists():
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def set_status(self, invoice_id: str, status: Union[InvoiceStatus, str]) -> Invoice:
        """Load an invoice, change its status and save it in place."""
        invoice = self.load(invoice_id)
        return self.save(replace(invoice, status=InvoiceStatus(status)))

    def delete(self, invoice_id: str) -> None:
        self._path_for(invoice_id).unlink(missing_ok=True)

    def duplicate(self, invoice_id: str, next_number: Optional[str]) -> Invoice:
        """Save a copy of an invoice under a new number, dated today."""
        source = self.load(invoice_id)
        clone = replace(
            source,
            id=None,
            invoice_number="" if next_number is None else str(next_number),
            date=today_iso(),
        )
        return self.save(clone)
