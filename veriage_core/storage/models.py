# veriage_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class AttestationRecord:
    """
    Ledger entry anchored under an opaque tx_ref.

    Records are never deleted; status only moves valid -> revoked.
    """
    tx_ref: str
    subject_proof_id: str
    timestamp: int              # ms since epoch
    issuer: str
    status: str = "valid"       # valid | revoked


@dataclass
class VerificationKey:
    id: str
    type: str
    controller: str
    public_key_multibase: str
    fingerprint: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "controller": self.controller,
            "publicKeyMultibase": self.public_key_multibase,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationKey":
        return cls(
            id=data["id"],
            type=data["type"],
            controller=data["controller"],
            public_key_multibase=data["publicKeyMultibase"],
            fingerprint=data.get("fingerprint", ""),
        )


@dataclass
class IdentifierDocument:
    id: str
    created: str
    updated: str
    verification_method: List[VerificationKey] = field(default_factory=list)

    @property
    def controller(self) -> str:
        return self.id

    @property
    def authentication(self) -> List[str]:
        return [k.id for k in self.verification_method]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "controller": self.controller,
            "verificationMethod": [k.to_dict() for k in self.verification_method],
            "authentication": self.authentication,
            "created": self.created,
            "updated": self.updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentifierDocument":
        return cls(
            id=data["id"],
            created=data["created"],
            updated=data["updated"],
            verification_method=[VerificationKey.from_dict(k) for k in data.get("verificationMethod", [])],
        )


@dataclass
class CredentialRecord:
    """Issuer-side record of a credential; document is the issued JSON body."""
    credential_id: str
    subject_id: str
    claim_type: str
    issued_at: str
    expires_at: str
    document: Dict[str, Any] = field(default_factory=dict)
