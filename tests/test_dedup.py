from __future__ import annotations

import json
import os

from conftest import FakeStore

from adapters.json_ledger_store import JsonLedgerStore
from core.dedup import DedupLedger


def test_add_is_idempotent() -> None:
    ledger = DedupLedger(None)
    assert ledger.add("1") is True
    assert ledger.add("1") is False
    assert ledger.contains("1")
    assert len(ledger) == 1


def test_load_without_prior_state_is_empty() -> None:
    ledger = DedupLedger.load(FakeStore(ids=None))
    assert len(ledger) == 0


def test_persist_failure_is_not_fatal() -> None:
    ledger = DedupLedger.load(FakeStore(ids=["1"], fail_save=True))
    ledger.add("2")
    assert ledger.persist() is False
    assert "2" in ledger


def test_ledger_without_store_never_persists() -> None:
    ledger = DedupLedger.load(None)
    ledger.add("1")
    assert ledger.persist() is False


def test_json_store_roundtrip(tmp_path) -> None:
    path = tmp_path / "cache.json"
    ledger = DedupLedger.load(JsonLedgerStore(str(path)))
    ledger.add("3")
    ledger.add("1")
    assert ledger.persist() is True

    assert json.loads(path.read_text(encoding="utf-8")) == ["1", "3"]
    reloaded = DedupLedger.load(JsonLedgerStore(str(path)))
    assert "1" in reloaded and "3" in reloaded


def test_json_store_corrupt_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    ledger = DedupLedger.load(JsonLedgerStore(str(path)))
    assert len(ledger) == 0


def test_json_store_non_array_starts_empty(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"ids": [1]}), encoding="utf-8")
    assert len(DedupLedger.load(JsonLedgerStore(str(path)))) == 0


def test_json_store_numeric_ids_become_strings(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text(json.dumps([123, "456"]), encoding="utf-8")
    ledger = DedupLedger.load(JsonLedgerStore(str(path)))
    assert "123" in ledger
    assert "456" in ledger


def test_json_store_overwrite_leaves_no_temp_files(tmp_path) -> None:
    path = tmp_path / "state" / "cache.json"
    store = JsonLedgerStore(str(path))
    store.save(["1"])
    store.save(["1", "2"])
    assert json.loads(path.read_text(encoding="utf-8")) == ["1", "2"]
    assert os.listdir(path.parent) == ["cache.json"]
