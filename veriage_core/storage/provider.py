# veriage_core/storage/provider.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from veriage_core.storage.models import AttestationRecord, IdentifierDocument, CredentialRecord


class StorageProvider(ABC):
    """
    Process-scoped state owned by the ledger and credential services.

    insert_* methods are atomic check-and-insert: they return False and leave
    the existing row untouched when the key is already taken.
    """

    # attestations
    @abstractmethod
    def insert_attestation(self, rec: AttestationRecord) -> bool: ...

    @abstractmethod
    def get_attestation(self, tx_ref: str) -> Optional[AttestationRecord]: ...

    @abstractmethod
    def revoke_attestation(self, tx_ref: str) -> bool:
        """Flip valid -> revoked; True only if this call made the transition."""

    # identifier documents
    @abstractmethod
    def insert_did_document(self, doc: IdentifierDocument) -> bool: ...

    @abstractmethod
    def get_did_document(self, did: str) -> Optional[IdentifierDocument]: ...

    # credentials
    @abstractmethod
    def insert_credential(self, rec: CredentialRecord) -> bool: ...

    @abstractmethod
    def get_credential(self, credential_id: str) -> Optional[CredentialRecord]: ...

    # audit
    @abstractmethod
    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None: ...

    @abstractmethod
    def list_events(self) -> List[Tuple[str, Dict[str, Any]]]: ...

    def close(self) -> None:
        return
