from __future__ import annotations

import json
import threading

import pytest

from invoicedesk import config
from invoicedesk.data.settings_store import SettingsStore


def test_read_creates_file_with_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"

    settings = SettingsStore(path).read()

    assert settings == config.DEFAULT_SETTINGS
    assert json.loads(path.read_text(encoding="utf-8")) == config.DEFAULT_SETTINGS


def test_read_backfills_missing_fields(tmp_path, write_json) -> None:
    path = write_json(tmp_path / "config.json", {"currency": "kn", "extra": True})

    settings = SettingsStore(path).read()

    assert settings["currency"] == "kn"
    assert settings["extra"] is True
    assert settings["taxRate"] == 25
    assert settings["lastInvoiceNumber"] == 0


def test_read_fails_soft_on_corrupt_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2", encoding="utf-8")

    assert SettingsStore(path).read() == config.DEFAULT_SETTINGS


def test_write_merges_over_existing_values(tmp_path) -> None:
    store = SettingsStore(tmp_path / "config.json")
    store.write({"currency": "£", "theme": "dark"})

    merged = store.write({"taxRate": 13})

    assert merged["currency"] == "£"
    assert merged["theme"] == "dark"
    assert merged["taxRate"] == 13
    assert store.read() == merged


def test_defaults_are_not_mutated_by_writes(tmp_path) -> None:
    store = SettingsStore(tmp_path / "config.json")

    settings = store.read()
    settings["business"]["name"] = "Changed"

    assert config.DEFAULT_SETTINGS["business"]["name"] == ""


def test_write_failure_is_raised(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.mkdir()

    with pytest.raises(OSError):
        SettingsStore(path).write({"theme": "dark"})


def test_next_invoice_number_increments_and_persists(tmp_path) -> None:
    path = tmp_path / "config.json"

    first = SettingsStore(path).next_invoice_number()
    second = SettingsStore(path).next_invoice_number()

    assert (first, second) == ("0001", "0002")
    assert SettingsStore(path).read()["lastInvoiceNumber"] == 2


def test_next_invoice_number_tolerates_bad_counter(tmp_path, write_json) -> None:
    path = write_json(tmp_path / "config.json", {"lastInvoiceNumber": "garbage"})

    assert SettingsStore(path).next_invoice_number() == "0001"


def test_next_invoice_number_beyond_four_digits(tmp_path, write_json) -> None:
    path = write_json(tmp_path / "config.json", {"lastInvoiceNumber": 9999})

    assert SettingsStore(path).next_invoice_number() == "10000"


def test_next_invoice_number_is_serialised_within_a_process(tmp_path) -> None:
    store = SettingsStore(tmp_path / "config.json")
    numbers = []

    def worker() -> None:
        for _ in range(10):
            numbers.append(store.next_invoice_number())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(numbers) == [str(n).zfill(4) for n in range(1, 41)]
