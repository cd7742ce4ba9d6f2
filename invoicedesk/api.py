"""Boundary operations offered to a UI process.

Every operation takes and returns plain JSON-like values, so any
request/response transport can sit in front of :meth:`InvoiceDeskApi.invoke`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from invoicedesk import config
from invoicedesk.data.invoice_repo import InvoiceRepository
from invoicedesk.data.json_store import EntityStore
from invoicedesk.data.settings_store import SettingsStore
from invoicedesk.models import Invoice
from invoicedesk.printing.pdf_exporter import InvoicePdfExporter

LOGGER = logging.getLogger("invoicedesk.api")


class InvoiceDeskApi:
    """Wires the stores for one data directory and dispatches operations."""

    def __init__(self, data_dir: Path | str | None = None, exporter: Optional[InvoicePdfExporter] = None) -> None:
        self.data_dir: Path = Path(data_dir) if data_dir else config.DATA_DIR
        self.settings = SettingsStore(self.data_dir / config.CONFIG_FILE_NAME)
        self.invoices = InvoiceRepository(self.data_dir / config.INVOICES_DIR_NAME)
        self.clients = EntityStore(self.data_dir / config.CLIENTS_FILE_NAME, prefix="client")
        self.profiles = EntityStore(self.data_dir / config.PROFILES_FILE_NAME, prefix="profile")
        self.exporter = exporter or InvoicePdfExporter()
        self._operations: Dict[str, Callable[[Any], Any]] = {
            "settings.get": lambda _payload: self.get_settings(),
            "settings.save": self.save_settings,
            "invoice.list": self.list_invoices,
            "invoice.load": self.load_invoice,
            "invoice.save": self.save_invoice,
            "invoice.delete": self.delete_invoice,
            "invoice.duplicate": self._duplicate_from_payload,
            "invoice.setStatus": self._set_status_from_payload,
            "invoice.nextNumber": lambda _payload: self.next_invoice_number(),
            "clients.list": self.clients_list,
            "clients.save": self.clients.save,
            "clients.delete": self.clients.delete,
            "profiles.list": self.profiles_list,
            "profiles.save": self.profiles.save,
            "profiles.delete": self.profiles.delete,
            "document.export": self._export_from_payload,
        }

    @property
    def operations(self) -> List[str]:
        return sorted(self._operations)

    def invoke(self, operation: str, payload: Any = None) -> Any:
        """Run ``operation`` with ``payload``.

        ``"invoice:list"`` is accepted as an alias of ``"invoice.list"``.
        Raises ``KeyError`` for unknown operations; store errors propagate.
        """
        name = operation.replace(":", ".")
        try:
            handler = self._operations[name]
        except KeyError:
            raise KeyError(f"Unknown operation: {operation}") from None
        LOGGER.debug("invoke %s", name)
        return handler(payload)

    # Settings
    def get_settings(self) -> Dict[str, Any]:
        return self.settings.read()

    def save_settings(self, partial: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return self.settings.write(partial or {})

    # Invoices
    def list_invoices(self, query: Any = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        if isinstance(query, Mapping):
            status = query.get("status", status)
            query = query.get("query")
        return self.invoices.list(query or "", status=status)

    def load_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.invoices.load(invoice_id).to_dict()

    def save_invoice(self, invoice: Mapping[str, Any]) -> Dict[str, Any]:
        return self.invoices.save(invoice).to_dict()

    def delete_invoice(self, invoice_id: str) -> None:
        self.invoices.delete(invoice_id)

    def duplicate_invoice(self, invoice_id: str, next_number: Optional[str]) -> Dict[str, Any]:
        return self.invoices.duplicate(invoice_id, next_number).to_dict()

    def _duplicate_from_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self.duplicate_invoice(payload["id"], payload.get("nextNumber"))

    def set_invoice_status(self, invoice_id: str, status: str) -> Dict[str, Any]:
        return self.invoices.set_status(invoice_id, status).to_dict()

    def _set_status_from_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self.set_invoice_status(payload["id"], payload["status"])

    def next_invoice_number(self) -> str:
        return self.settings.next_invoice_number()

    # Clients / profiles
    def clients_list(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.clients.list(query or "")

    def profiles_list(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.profiles.list(query or "")

    # Documents
    def export_document(self, invoice: Any, destination: Path | str | None) -> Dict[str, Any]:
        """Render ``invoice`` to ``destination``; no destination means canceled."""
        if not destination:
            return {"canceled": True}
        path = self.exporter.export(Invoice.coerce(invoice), destination)
        return {"canceled": False, "filePath": str(path)}

    def _export_from_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self.export_document(payload["invoice"], payload.get("destinationPath"))
