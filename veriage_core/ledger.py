"""
veriage_core.ledger
-------------------
Append-only attestation ledger. Each create() anchors a subject proof id
under a fresh opaque tx_ref; records are never deleted and may only be
revoked once.
"""

from __future__ import annotations
from typing import Callable, Optional

from .constants import (
    LEDGER_ISSUER, TX_REF_PREFIX, ATTESTATION_VALID, MAX_ID_ATTEMPTS,
)
from .errors import UnknownReference
from .logger import get_logger
from .storage import AttestationRecord, StorageProvider, InMemoryStorage
from .utils import now_ms, random_hex

log = get_logger("Veriage.Ledger")


class AttestationLedger:
    def __init__(
        self,
        store: Optional[StorageProvider] = None,
        clock: Optional[Callable[[], int]] = None,
        issuer: str = LEDGER_ISSUER,
    ):
        self.store = store if store is not None else InMemoryStorage()
        self.clock = clock or now_ms
        self.issuer = issuer

    def create(self, subject_proof_id: str) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            rec = AttestationRecord(
                tx_ref=TX_REF_PREFIX + random_hex(32),
                subject_proof_id=subject_proof_id,
                timestamp=self.clock(),
                issuer=self.issuer,
                status=ATTESTATION_VALID,
            )
            if self.store.insert_attestation(rec):
                self.store.log_event("attestation.created", {"tx_ref": rec.tx_ref, "ts": rec.timestamp})
                log.info(f"attestation anchored: {rec.tx_ref}")
                return rec.tx_ref
            log.warning("tx_ref collision, regenerating")
        raise RuntimeError("could not allocate a unique tx_ref")

    def verify(self, tx_ref: str) -> bool:
        rec = self.store.get_attestation(tx_ref)
        if rec is None:
            log.debug(f"attestation not found: {tx_ref}")
            return False
        return rec.status == ATTESTATION_VALID

    def revoke(self, tx_ref: str) -> bool:
        revoked = self.store.revoke_attestation(tx_ref)
        if revoked:
            self.store.log_event("attestation.revoked", {"tx_ref": tx_ref, "ts": self.clock()})
            log.info(f"attestation revoked: {tx_ref}")
        return revoked

    def lookup(self, tx_ref: str) -> Optional[AttestationRecord]:
        return self.store.get_attestation(tx_ref)

    def get(self, tx_ref: str) -> AttestationRecord:
        rec = self.store.get_attestation(tx_ref)
        if rec is None:
            raise UnknownReference(f"no attestation for {tx_ref}")
        return rec
