import re
from concurrent.futures import ThreadPoolExecutor

import pytest

import veriage_core.ledger as ledger_mod
from veriage_core.errors import UnknownReference
from veriage_core.ledger import AttestationLedger


def test_ledger_lifecycle(store, clock):
    ledger = AttestationLedger(store, clock=clock)
    tx = ledger.create("urn:credential:1:abc")
    assert re.fullmatch(r"tx_[0-9a-f]{64}", tx)
    assert ledger.verify(tx)

    assert ledger.revoke(tx) is True
    assert ledger.verify(tx) is False
    # one-way: second revoke is a no-op
    assert ledger.revoke(tx) is False
    assert ledger.lookup(tx).status == "revoked"


def test_unknown_reference(store):
    ledger = AttestationLedger(store)
    assert ledger.verify("tx_missing") is False
    assert ledger.revoke("tx_missing") is False
    assert ledger.lookup("tx_missing") is None
    with pytest.raises(UnknownReference):
        ledger.get("tx_missing")


def test_lookup_record_fields(store, clock):
    ledger = AttestationLedger(store, clock=clock)
    tx = ledger.create("proof-1")
    rec = ledger.lookup(tx)
    assert rec.tx_ref == tx
    assert rec.subject_proof_id == "proof-1"
    assert rec.timestamp == clock()
    assert rec.issuer == "did:example:issuer123"
    assert rec.status == "valid"


def test_create_never_upserts(store):
    ledger = AttestationLedger(store)
    a = ledger.create("proof-1")
    b = ledger.create("proof-1")
    assert a != b
    ledger.revoke(a)
    assert ledger.verify(b)


def test_lookup_is_read_only(store):
    ledger = AttestationLedger(store)
    tx = ledger.create("proof-1")
    ledger.lookup(tx).status = "revoked"
    assert ledger.verify(tx)


def test_collision_regenerates(store, monkeypatch):
    values = iter(["aa" * 32, "aa" * 32, "bb" * 32])
    monkeypatch.setattr(ledger_mod, "random_hex", lambda n: next(values))
    ledger = AttestationLedger(store)
    assert ledger.create("p1") == "tx_" + "aa" * 32
    assert ledger.create("p2") == "tx_" + "bb" * 32
    assert ledger.lookup("tx_" + "aa" * 32).subject_proof_id == "p1"


def test_collision_exhaustion_raises(store, monkeypatch):
    monkeypatch.setattr(ledger_mod, "random_hex", lambda n: "cc" * 32)
    ledger = AttestationLedger(store)
    ledger.create("p1")
    with pytest.raises(RuntimeError):
        ledger.create("p2")


def test_concurrent_creates_are_unique(store):
    ledger = AttestationLedger(store)
    with ThreadPoolExecutor(max_workers=8) as pool:
        refs = list(pool.map(ledger.create, [f"proof-{i}" for i in range(200)]))
    assert len(set(refs)) == 200
    assert all(ledger.verify(r) for r in refs)


def test_audit_trail_and_logging(store, caplog):
    caplog.set_level("INFO")
    ledger = AttestationLedger(store)
    tx = ledger.create("proof-1")
    ledger.revoke(tx)
    events = [e for e, _ in store.list_events()]
    assert events == ["attestation.created", "attestation.revoked"]
    assert "attestation revoked" in caplog.text
