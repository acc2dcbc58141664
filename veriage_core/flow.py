"""
veriage_core.flow
-----------------
Wires the three services into the full age verification round trip:

    enroll:  DID -> threshold proof -> credential carrying the proof id -> ledger anchor
    verify:  ledger anchor -> credential -> proof at the relying party's threshold
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .credentials import Credential, CredentialService
from .errors import MalformedToken, UnknownReference
from .ledger import AttestationLedger
from .logger import get_logger
from .proof import DateLike, ProofService
from .utils import sha256

log = get_logger("Veriage.Flow")

PROOF_ID_LEN = 20


def proof_id(token: str) -> Optional[str]:
    """First 20 hex chars of sha256 over the whole token."""
    if not isinstance(token, str):
        return None
    return sha256(token.encode("utf-8"))[:PROOF_ID_LEN]


@dataclass(frozen=True)
class Enrollment:
    did: str
    proof: str
    credential: str
    tx_ref: str


class AgeVerificationFlow:
    def __init__(self, proofs: ProofService, credentials: CredentialService, ledger: AttestationLedger):
        self.proofs = proofs
        self.credentials = credentials
        self.ledger = ledger

    def enroll(self, birthdate: DateLike, threshold: int = 18, claim_type: str = "AgeVerification") -> Enrollment:
        """Raises ThresholdNotMet before any identifier, credential or anchor is created."""
        proof = self.proofs.create(birthdate, threshold)
        did = self.credentials.create_identifier()
        credential = self.credentials.issue(did, claim_type, {
            "ageVerified": f"{threshold}+",
            "proofType": "ZKP",
            "proofId": proof_id(proof),
        })
        credential_id = Credential.from_json(credential).id
        tx_ref = self.ledger.create(credential_id)
        log.info(f"enrollment complete: {did} anchored at {tx_ref}")
        return Enrollment(did=did, proof=proof, credential=credential, tx_ref=tx_ref)

    def verify(self, enrollment: Enrollment, required_threshold: int) -> bool:
        try:
            record = self.ledger.get(enrollment.tx_ref)
            cred = Credential.from_json(enrollment.credential)
        except (UnknownReference, MalformedToken) as e:
            log.debug(f"enrollment rejected: {e}")
            return False

        if not self.ledger.verify(enrollment.tx_ref) or record.subject_proof_id != cred.id:
            log.debug("enrollment rejected: ledger anchor invalid or not bound to credential")
            return False
        if not self.credentials.verify(enrollment.credential) or cred.subject_id != enrollment.did:
            log.debug("enrollment rejected: credential invalid or not bound to identifier")
            return False
        if cred.claims.get("proofId") != proof_id(enrollment.proof):
            log.debug("enrollment rejected: proof not referenced by credential")
            return False
        return self.proofs.verify(enrollment.proof, required_threshold)
