"""Configuration constants for Invoice Desk."""

import os
from pathlib import Path

# Root directory holding every persisted record.
DATA_DIR: Path = Path(
    os.environ.get("INVOICEDESK_DATA_DIR", Path.home() / ".invoicedesk")
).expanduser()

# Names of the files and folders created inside DATA_DIR.
INVOICES_DIR_NAME: str = "invoices"
CONFIG_FILE_NAME: str = "config.json"
CLIENTS_FILE_NAME: str = "clients.json"
PROFILES_FILE_NAME: str = "profiles.json"

# Currency symbol used when an invoice carries none.
DEFAULT_CURRENCY: str = "$"

# Values backfilled into the settings record on every read and write.
DEFAULT_SETTINGS: dict = {
    "taxRate": 25,
    "currency": "€",
    "business": {"name": "", "address": "", "phone": "", "email": ""},
    "theme": "light",
    "lastInvoiceNumber": 0,
}

# Exported document layout.
PAGE_SIZE: str = "A4"
PAGE_MARGIN_MM: float = 14.0
DOCUMENT_TITLE: str = "INVOICE"
TABLE_HEADER_COLOR: str = "#2196f3"

LOG_LEVEL: str = os.environ.get("INVOICEDESK_LOG_LEVEL", "WARNING").upper()
