"""
veriage_core.credentials
------------------------
Identifier registry and credential issuer/verifier.

Identifiers are did:example DIDs whose documents carry one Ed25519
verification key. Credentials are JSON claim documents bound to a DID,
valid for one year from issuance.

The proofBlock signature is inert filler: verify() checks only that the
credential was issued by this service (its id is in the issuer store) and
that it has not expired. A credential built elsewhere, however well formed,
never verifies.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import json

from .constants import (
    CREDENTIAL_CONTEXT, CREDENTIAL_ISSUER, CREDENTIAL_SIGNATURE_TYPE,
    CREDENTIAL_TTL_MS, CREDENTIAL_VERIFICATION_METHOD, DID_METHOD,
    MAX_ID_ATTEMPTS, VERIFICATION_KEY_TYPE,
)
from .crypto import ed25519_generate, ed25519_load_public, public_key_multibase, compute_pubkey_fingerprint
from .errors import MalformedToken, UnknownIdentifier, UnknownReference
from .logger import get_logger
from .storage import CredentialRecord, IdentifierDocument, InMemoryStorage, StorageProvider, VerificationKey
from .utils import b64e, from_ms, iso_ms, now_ms, parse_iso, random_hex

log = get_logger("Veriage.Credentials")


@dataclass
class Credential:
    id: str
    subject_id: str
    claim_type: str
    claims: Dict[str, Any]
    issued_at: str
    expires_at: str
    proof_block: Dict[str, Any] = field(default_factory=dict)
    issuer: str = CREDENTIAL_ISSUER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@context": list(CREDENTIAL_CONTEXT),
            "id": self.id,
            "type": ["VerifiableCredential", self.claim_type + "Credential"],
            "issuer": self.issuer,
            "subjectId": self.subject_id,
            "claimType": self.claim_type,
            "claims": self.claims,
            "issuedAt": self.issued_at,
            "expiresAt": self.expires_at,
            "proofBlock": self.proof_block,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_dict(cls, data: Any) -> "Credential":
        if not isinstance(data, dict):
            raise MalformedToken("credential is not an object")
        for key in ("id", "subjectId", "claimType", "issuedAt", "expiresAt"):
            if not isinstance(data.get(key), str):
                raise MalformedToken(f"field {key!r} missing or not a string")
        if not isinstance(data.get("claims"), dict):
            raise MalformedToken("field 'claims' missing or not an object")
        if not isinstance(data.get("proofBlock"), dict):
            raise MalformedToken("field 'proofBlock' missing or not an object")
        for key in ("issuedAt", "expiresAt"):
            try:
                parse_iso(data[key])
            except ValueError as e:
                raise MalformedToken(f"field {key!r} is not an ISO-8601 timestamp") from e

        return cls(
            id=data["id"],
            subject_id=data["subjectId"],
            claim_type=data["claimType"],
            claims=data["claims"],
            issued_at=data["issuedAt"],
            expires_at=data["expiresAt"],
            proof_block=data["proofBlock"],
            issuer=data.get("issuer", CREDENTIAL_ISSUER),
        )

    @classmethod
    def from_json(cls, token: str) -> "Credential":
        try:
            data = json.loads(token)
        except (TypeError, ValueError) as e:
            raise MalformedToken(f"undecodable credential: {e}") from e
        return cls.from_dict(data)


class CredentialService:
    def __init__(
        self,
        store: Optional[StorageProvider] = None,
        clock: Optional[Callable[[], int]] = None,
        issuer: str = CREDENTIAL_ISSUER,
    ):
        self.store = store if store is not None else InMemoryStorage()
        self.clock = clock or now_ms
        self.issuer = issuer

    # --- identifier registry ---

    def create_identifier(self, public_key: Optional[bytes] = None) -> str:
        did, _ = self.create_identifier_with_key(public_key)
        return did

    def create_identifier_with_key(self, public_key: Optional[bytes] = None) -> Tuple[str, Optional[bytes]]:
        """
        Register a new DID.

        With no public_key a fresh Ed25519 keypair is generated and its private
        half returned to the caller; the registry only ever keeps public keys.
        A supplied public_key must be a raw 32-byte Ed25519 key.
        """
        private_key = None
        if public_key is None:
            private_key, public_key = ed25519_generate()
        else:
            public_key = ed25519_load_public(public_key)

        pub_b64 = b64e(public_key)
        stamp = iso_ms(from_ms(self.clock()))

        for _ in range(MAX_ID_ATTEMPTS):
            did = f"{DID_METHOD}:{random_hex(8)}"
            doc = IdentifierDocument(
                id=did,
                created=stamp,
                updated=stamp,
                verification_method=[
                    VerificationKey(
                        id=f"{did}#keys-1",
                        type=VERIFICATION_KEY_TYPE,
                        controller=did,
                        public_key_multibase=public_key_multibase(public_key),
                        fingerprint=compute_pubkey_fingerprint(pub_b64),
                    )
                ],
            )
            if self.store.insert_did_document(doc):
                self.store.log_event("did.created", {"did": did})
                log.info(f"identifier created: {did}")
                return did, private_key
            log.warning("identifier collision, regenerating")
        raise RuntimeError("could not allocate a unique identifier")

    def resolve(self, did: str) -> Optional[IdentifierDocument]:
        return self.store.get_did_document(did)

    # --- credentials ---

    def issue(self, did: str, claim_type: str, claims: Mapping[str, Any]) -> str:
        if not isinstance(claim_type, str) or not claim_type:
            raise ValueError("claim_type must be a non-empty string")
        if not isinstance(claims, Mapping):
            raise ValueError("claims must be a mapping")
        if self.store.get_did_document(did) is None:
            raise UnknownIdentifier(f"identifier not found: {did}")

        now = self.clock()
        issued_at = iso_ms(from_ms(now))
        expires_at = iso_ms(from_ms(now + CREDENTIAL_TTL_MS))

        for _ in range(MAX_ID_ATTEMPTS):
            cred = Credential(
                id=f"urn:credential:{now}:{random_hex(8)}",
                subject_id=did,
                claim_type=claim_type,
                claims=dict(claims),
                issued_at=issued_at,
                expires_at=expires_at,
                proof_block={
                    "type": CREDENTIAL_SIGNATURE_TYPE,
                    "created": issued_at,
                    "verificationMethod": CREDENTIAL_VERIFICATION_METHOD,
                    "proofPurpose": "assertionMethod",
                    # not a signature; nothing checks this value
                    "proofValue": "z" + random_hex(16),
                },
                issuer=self.issuer,
            )
            # serialize before touching the store; non-JSON claims raise here
            token = cred.to_json()
            rec = CredentialRecord(
                credential_id=cred.id,
                subject_id=did,
                claim_type=claim_type,
                issued_at=issued_at,
                expires_at=expires_at,
                document=json.loads(token),
            )
            if self.store.insert_credential(rec):
                self.store.log_event("credential.issued", {"id": cred.id, "subject": did, "type": claim_type})
                log.info(f"credential issued: {cred.id} -> {did}")
                return token
            log.warning("credential id collision, regenerating")
        raise RuntimeError("could not allocate a unique credential id")

    def verify(self, token: str) -> bool:
        try:
            cred = Credential.from_json(token)
        except MalformedToken as e:
            log.debug(f"credential rejected (malformed): {e}")
            return False

        if self.store.get_credential(cred.id) is None:
            log.debug(f"credential rejected (unknown id): {cred.id}")
            return False

        if from_ms(self.clock()) > parse_iso(cred.expires_at):
            log.debug(f"credential rejected (expired): {cred.id}")
            return False

        return True

    def get_credential(self, credential_id: str) -> Credential:
        rec = self.store.get_credential(credential_id)
        if rec is None:
            raise UnknownReference(f"credential not found: {credential_id}")
        return Credential.from_dict(rec.document)
