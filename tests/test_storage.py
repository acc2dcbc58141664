import pytest

from veriage_core.credentials import CredentialService
from veriage_core.ledger import AttestationLedger
from veriage_core.storage import (
    AttestationRecord, CredentialRecord, IdentifierDocument, InMemoryStorage, SQLiteStorage,
    VerificationKey, load_storage_provider,
)


def _providers(tmp_path):
    return [InMemoryStorage(), SQLiteStorage(str(tmp_path / "state.db"))]


def test_attestation_insert_is_check_and_insert(tmp_path):
    for s in _providers(tmp_path):
        rec = AttestationRecord(tx_ref="tx_1", subject_proof_id="p", timestamp=1, issuer="i")
        assert s.insert_attestation(rec)
        dup = AttestationRecord(tx_ref="tx_1", subject_proof_id="other", timestamp=2, issuer="i")
        assert not s.insert_attestation(dup)
        assert s.get_attestation("tx_1") == rec


def test_revoke_attestation_transition(tmp_path):
    for s in _providers(tmp_path):
        s.insert_attestation(AttestationRecord(tx_ref="tx_1", subject_proof_id="p", timestamp=1, issuer="i"))
        assert s.revoke_attestation("tx_1")
        assert not s.revoke_attestation("tx_1")
        assert not s.revoke_attestation("tx_unknown")
        assert s.get_attestation("tx_1").status == "revoked"


def test_did_document_roundtrip(tmp_path):
    doc = IdentifierDocument(
        id="did:example:01",
        created="2024-06-15T12:00:00.000Z",
        updated="2024-06-15T12:00:00.000Z",
        verification_method=[VerificationKey(
            id="did:example:01#keys-1",
            type="Ed25519VerificationKey2020",
            controller="did:example:01",
            public_key_multibase="zabc",
            fingerprint="f" * 32,
        )],
    )
    for s in _providers(tmp_path):
        assert s.insert_did_document(doc)
        assert not s.insert_did_document(doc)
        assert s.get_did_document("did:example:01") == doc
        assert s.get_did_document("did:example:02") is None


def test_credential_roundtrip(tmp_path):
    rec = CredentialRecord(
        credential_id="urn:credential:1:aa",
        subject_id="did:example:01",
        claim_type="AgeVerification",
        issued_at="2024-06-15T12:00:00.000Z",
        expires_at="2025-06-15T12:00:00.000Z",
        document={"id": "urn:credential:1:aa", "claims": {"ageVerified": "18+"}},
    )
    for s in _providers(tmp_path):
        assert s.insert_credential(rec)
        assert not s.insert_credential(rec)
        assert s.get_credential(rec.credential_id) == rec


def test_audit_events(tmp_path):
    for s in _providers(tmp_path):
        s.log_event("did.created", {"did": "did:example:01"})
        s.log_event("credential.issued", {"id": "x"})
        assert s.list_events() == [
            ("did.created", {"did": "did:example:01"}),
            ("credential.issued", {"id": "x"}),
        ]


def test_sqlite_schema_exists(tmp_path):
    store = SQLiteStorage(str(tmp_path / "state.db"))
    cur = store.db.execute("PRAGMA table_info(attestations)")
    cols = {row[1] for row in cur.fetchall()}
    assert {"tx_ref", "subject_proof_id", "timestamp", "issuer", "status"} <= cols


def test_sqlite_state_survives_reopen(tmp_path, clock):
    path = str(tmp_path / "state.db")
    first = SQLiteStorage(path)
    ledger = AttestationLedger(first, clock=clock)
    creds = CredentialService(first, clock=clock)
    tx = ledger.create("proof-1")
    token = creds.issue(creds.create_identifier(), "AgeVerification", {"ageVerified": "18+"})
    first.close()

    second = SQLiteStorage(path)
    assert AttestationLedger(second, clock=clock).verify(tx)
    assert CredentialService(second, clock=clock).verify(token)


def test_load_storage_provider(monkeypatch, tmp_path):
    monkeypatch.delenv("VERIAGE_STORAGE_PROVIDER", raising=False)
    assert isinstance(load_storage_provider(), InMemoryStorage)

    monkeypatch.setenv("VERIAGE_STORAGE_PROVIDER", "sqlite")
    monkeypatch.setenv("VERIAGE_DB_PATH", str(tmp_path / "env.db"))
    assert isinstance(load_storage_provider(), SQLiteStorage)
    assert (tmp_path / "env.db").exists()

    assert isinstance(load_storage_provider({"provider": "memory"}), InMemoryStorage)

    with pytest.raises(ValueError):
        load_storage_provider({"provider": "firestore"})
