import copy
import threading
from typing import Dict, Any, List, Tuple
from veriage_core.storage.models import AttestationRecord, IdentifierDocument, CredentialRecord
from veriage_core.storage.provider import StorageProvider


class InMemoryStorage(StorageProvider):
    def __init__(self):
        self.attestations: Dict[str, AttestationRecord] = {}
        self.did_documents: Dict[str, IdentifierDocument] = {}
        self.credentials: Dict[str, CredentialRecord] = {}
        self.audit: List[Tuple[str, Dict[str, Any]]] = []
        self._lock = threading.RLock()

    # attestations
    def insert_attestation(self, rec: AttestationRecord) -> bool:
        with self._lock:
            if rec.tx_ref in self.attestations:
                return False
            self.attestations[rec.tx_ref] = copy.copy(rec)
            return True

    def get_attestation(self, tx_ref: str):
        with self._lock:
            rec = self.attestations.get(tx_ref)
            return copy.copy(rec) if rec else None

    def revoke_attestation(self, tx_ref: str) -> bool:
        with self._lock:
            rec = self.attestations.get(tx_ref)
            if not rec or rec.status != "valid":
                return False
            rec.status = "revoked"
            return True

    # identifier documents
    def insert_did_document(self, doc: IdentifierDocument) -> bool:
        with self._lock:
            if doc.id in self.did_documents:
                return False
            self.did_documents[doc.id] = copy.deepcopy(doc)
            return True

    def get_did_document(self, did: str):
        with self._lock:
            doc = self.did_documents.get(did)
            return copy.deepcopy(doc) if doc else None

    # credentials
    def insert_credential(self, rec: CredentialRecord) -> bool:
        with self._lock:
            if rec.credential_id in self.credentials:
                return False
            self.credentials[rec.credential_id] = copy.deepcopy(rec)
            return True

    def get_credential(self, credential_id: str):
        with self._lock:
            rec = self.credentials.get(credential_id)
            return copy.deepcopy(rec) if rec else None

    # audit
    def log_event(self, event_type: str, payload: Dict[str, Any]):
        with self._lock:
            self.audit.append((event_type, dict(payload)))

    def list_events(self):
        with self._lock:
            return list(self.audit)
