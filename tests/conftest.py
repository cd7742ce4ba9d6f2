from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def write_json():
    def _write(path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_invoice_data() -> dict:
    return {
        "invoiceNumber": "INV 001",
        "date": "2024-03-01",
        "from": {"name": "Studio Nord", "address": "Ilica 1\n10000 Zagreb", "email": "hi@nord.hr"},
        "billTo": {"name": "Ivan Horvat d.o.o.", "address": "Vukovarska 5", "phone": "+385 1 234"},
        "items": [
            {"description": "Design work", "quantity": 10, "unitPrice": 45.5},
            {"description": "Hosting", "quantity": 1, "unitPrice": 12.99},
        ],
        "notes": "Payable within 15 days.",
        "taxRate": 25,
        "currency": "€",
        "status": "open",
    }
