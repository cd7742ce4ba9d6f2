from __future__ import annotations

from pathlib import Path

import pytest

from invoicedesk.api import InvoiceDeskApi
from invoicedesk.data.invoice_repo import InvoiceNotFoundError


class FakeExporter:
    def __init__(self) -> None:
        self.calls = []

    def export(self, invoice, output_path):
        self.calls.append((invoice, output_path))
        path = Path(output_path)
        path.write_bytes(b"%PDF-fake")
        return path


@pytest.fixture
def api(tmp_path) -> InvoiceDeskApi:
    return InvoiceDeskApi(tmp_path / "data", exporter=FakeExporter())


def test_layout_under_data_dir(api, sample_invoice_data) -> None:
    api.invoke("settings.get")
    api.invoke("invoice.save", sample_invoice_data)
    api.invoke("clients.save", {"name": "Acme"})
    api.invoke("profiles.save", {"name": "Me"})

    names = sorted(path.name for path in api.data_dir.iterdir())
    assert names == ["clients.json", "config.json", "invoices", "profiles.json"]


def test_invoice_operations_round_trip(api, sample_invoice_data) -> None:
    saved = api.invoke("invoice.save", sample_invoice_data)
    loaded = api.invoke("invoice.load", saved["id"])

    assert loaded == saved
    assert loaded["total"] == 584.99
    assert [s["id"] for s in api.invoke("invoice.list", {"query": "horvat"})] == [saved["id"]]
    assert api.invoke("invoice.list") == api.invoke("invoice.list", "")

    api.invoke("invoice.delete", saved["id"])
    with pytest.raises(InvoiceNotFoundError):
        api.invoke("invoice.load", saved["id"])


def test_colon_operation_names_are_accepted(api) -> None:
    assert api.invoke("invoice:nextNumber") == "0001"
    assert api.invoke("invoice.nextNumber") == "0002"
    assert api.invoke("settings:get")["lastInvoiceNumber"] == 2


def test_unknown_operation(api) -> None:
    with pytest.raises(KeyError):
        api.invoke("invoice.explode")


def test_duplicate_operation(api, sample_invoice_data) -> None:
    saved = api.invoke("invoice.save", sample_invoice_data)

    copy = api.invoke("invoice.duplicate", {"id": saved["id"], "nextNumber": api.invoke("invoice.nextNumber")})

    assert copy["invoiceNumber"] == "0001"
    assert copy["id"] == "0001"
    assert len(api.invoke("invoice.list")) == 2


def test_settings_save_merges(api) -> None:
    api.invoke("settings.save", {"currency": "kn"})

    settings = api.invoke("settings.save", {"business": {"name": "Studio"}})

    assert settings["currency"] == "kn"
    assert settings["business"] == {"name": "Studio"}


def test_client_and_profile_operations(api) -> None:
    api.invoke("clients.save", {"name": "Acme Corp", "email": "a@acme.io"})
    api.invoke("clients.save", {"name": "Acme Corp", "phone": "123"})
    api.invoke("profiles.save", {"name": "Studio Nord"})

    (client,) = api.invoke("clients.list", "acme")
    assert client == {"name": "Acme Corp", "email": "a@acme.io", "phone": "123", "id": "acme-corp"}
    assert [p["id"] for p in api.invoke("profiles.list")] == ["studio-nord"]

    api.invoke("clients.delete", "acme-corp")
    api.invoke("profiles.delete", "studio-nord")
    assert api.invoke("clients.list") == []
    assert api.invoke("profiles.list", None) == []


def test_export_without_destination_is_canceled(api, sample_invoice_data) -> None:
    assert api.invoke("document.export", {"invoice": sample_invoice_data}) == {"canceled": True}
    assert api.exporter.calls == []


def test_export_passes_computed_invoice(api, tmp_path, sample_invoice_data) -> None:
    destination = tmp_path / "out.pdf"

    result = api.invoke("document.export", {"invoice": sample_invoice_data, "destinationPath": str(destination)})

    assert result == {"canceled": False, "filePath": str(destination)}
    (invoice, path), = api.exporter.calls
    assert invoice.total == 584.99
    assert path == str(destination)


def test_status_operations(api, sample_invoice_data) -> None:
    saved = api.invoke("invoice.save", sample_invoice_data)
    api.invoke("invoice.save", dict(sample_invoice_data, invoiceNumber="INV 002"))

    updated = api.invoke("invoice:setStatus", {"id": saved["id"], "status": "paid"})

    assert updated["status"] == "paid"
    assert api.invoke("invoice.load", saved["id"])["status"] == "paid"
    assert [s["id"] for s in api.invoke("invoice.list", {"status": "paid"})] == [saved["id"]]
    assert [s["id"] for s in api.invoke("invoice.list", {"query": "inv", "status": "open"})] == ["inv-002"]
    assert [s["id"] for s in api.list_invoices(status="paid")] == [saved["id"]]
