from __future__ import annotations
from typing import Optional, Dict, Any, List, Tuple
import json, sqlite3, os, threading
from veriage_core.storage.provider import StorageProvider
from veriage_core.storage.models import AttestationRecord, IdentifierDocument, CredentialRecord
from veriage_core.utils import canonical_json, now_ts


class SQLiteStorage(StorageProvider):
    def __init__(self, path="db/veriage_state.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._lock = threading.RLock()

        self._init()

    def _init(self) -> None:
        c = self.db.cursor()

        c.execute("""CREATE TABLE IF NOT EXISTS attestations(
            tx_ref TEXT PRIMARY KEY,
            subject_proof_id TEXT NOT NULL,
            timestamp INTEGER NOT NULL,
            issuer TEXT NOT NULL,
            status TEXT NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS did_documents(
            did TEXT PRIMARY KEY,
            document TEXT NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS credentials(
            credential_id TEXT PRIMARY KEY,
            subject_id TEXT NOT NULL,
            claim_type TEXT NOT NULL,
            issued_at TEXT NOT NULL,
            expires_at TEXT NOT NULL,
            document TEXT NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS audit(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            ts TEXT,
            event_type TEXT,
            payload TEXT
        )""")

        self.db.commit()

    def _insert_or_ignore(self, sql: str, params: tuple) -> bool:
        with self._lock:
            cur = self.db.execute(sql, params)
            self.db.commit()
            return cur.rowcount == 1

    # --- attestations ---

    def insert_attestation(self, rec: AttestationRecord) -> bool:
        return self._insert_or_ignore(
            "INSERT OR IGNORE INTO attestations(tx_ref,subject_proof_id,timestamp,issuer,status) VALUES(?,?,?,?,?)",
            (rec.tx_ref, rec.subject_proof_id, rec.timestamp, rec.issuer, rec.status),
        )

    def get_attestation(self, tx_ref: str) -> Optional[AttestationRecord]:
        with self._lock:
            cur = self.db.execute(
                "SELECT tx_ref,subject_proof_id,timestamp,issuer,status FROM attestations WHERE tx_ref=?", (tx_ref,)
            )
            row = cur.fetchone()
        if not row: return None
        return AttestationRecord(*row)

    def revoke_attestation(self, tx_ref: str) -> bool:
        with self._lock:
            cur = self.db.execute(
                "UPDATE attestations SET status='revoked' WHERE tx_ref=? AND status='valid'", (tx_ref,)
            )
            self.db.commit()
            return cur.rowcount == 1

    # --- identifier documents ---

    def insert_did_document(self, doc: IdentifierDocument) -> bool:
        return self._insert_or_ignore(
            "INSERT OR IGNORE INTO did_documents(did,document) VALUES(?,?)",
            (doc.id, canonical_json(doc.to_dict()).decode("utf-8")),
        )

    def get_did_document(self, did: str) -> Optional[IdentifierDocument]:
        with self._lock:
            cur = self.db.execute("SELECT document FROM did_documents WHERE did=?", (did,))
            row = cur.fetchone()
        if not row: return None
        return IdentifierDocument.from_dict(json.loads(row[0]))

    # --- credentials ---

    def insert_credential(self, rec: CredentialRecord) -> bool:
        return self._insert_or_ignore(
            "INSERT OR IGNORE INTO credentials(credential_id,subject_id,claim_type,issued_at,expires_at,document) "
            "VALUES(?,?,?,?,?,?)",
            (
                rec.credential_id,
                rec.subject_id,
                rec.claim_type,
                rec.issued_at,
                rec.expires_at,
                canonical_json(rec.document).decode("utf-8"),
            ),
        )

    def get_credential(self, credential_id: str) -> Optional[CredentialRecord]:
        with self._lock:
            cur = self.db.execute(
                "SELECT credential_id,subject_id,claim_type,issued_at,expires_at,document "
                "FROM credentials WHERE credential_id=?",
                (credential_id,),
            )
            row = cur.fetchone()
        if not row: return None
        credential_id, subject_id, claim_type, issued_at, expires_at, document = row
        return CredentialRecord(
            credential_id=credential_id,
            subject_id=subject_id,
            claim_type=claim_type,
            issued_at=issued_at,
            expires_at=expires_at,
            document=json.loads(document),
        )

    # --- audit ---

    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.db.execute("INSERT INTO audit(ts,event_type,payload) VALUES(?,?,?)",
                            (now_ts(), event_type, canonical_json(payload).decode("utf-8")))
            self.db.commit()

    def list_events(self) -> List[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            cur = self.db.execute("SELECT event_type, payload FROM audit ORDER BY seq")
            rows = cur.fetchall()
        return [(event_type, json.loads(payload)) for event_type, payload in rows]

    def close(self):
        self.db.close()
