"""
Veriage Core Package
====================
Privacy-preserving age checks built from three services:

- ProofService: commitment-based age threshold proofs
- CredentialService: DID registry plus issuance/verification of claim documents
- AttestationLedger: append-only, revocable attestation records

Stores are pluggable (in-memory default, SQLite) and injected per service.
"""

from .errors import VeriageError, ThresholdNotMet, MalformedToken, UnknownIdentifier, UnknownReference
from .proof import ProofService, ThresholdProof, ProofCheck, calculate_age
from .ledger import AttestationLedger
from .credentials import Credential, CredentialService
from .flow import AgeVerificationFlow, Enrollment
from .storage import load_storage_provider

__all__ = [
    "VeriageError",
    "ThresholdNotMet",
    "MalformedToken",
    "UnknownIdentifier",
    "UnknownReference",
    "ProofService",
    "ThresholdProof",
    "ProofCheck",
    "calculate_age",
    "AttestationLedger",
    "Credential",
    "CredentialService",
    "AgeVerificationFlow",
    "Enrollment",
    "load_storage_provider",
]
