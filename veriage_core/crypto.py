"""
veriage_core.crypto
-------------------
Key material for identifier documents:

- Ed25519 keypair generation for verification-key descriptors
- Validation of caller-supplied Ed25519 public keys
- Stable public key fingerprints

Credential proof blocks are NOT signed with these keys; the signature value
in a credential is inert filler.
"""

from __future__ import annotations
from typing import Tuple
from cryptography.hazmat.primitives.asymmetric import ed25519
from .utils import b64e, b64d, sha256

# --------- Ed25519 ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()

def ed25519_load_public(pub_raw: bytes) -> bytes:
    """Round-trip a raw public key through cryptography; raises ValueError if it is not a valid Ed25519 key."""
    return ed25519.Ed25519PublicKey.from_public_bytes(pub_raw).public_bytes_raw()

def public_key_multibase(pub_raw: bytes) -> str:
    # "z" prefix kept for document shape; payload is base64, not base58btc
    return "z" + b64e(pub_raw)

def compute_pubkey_fingerprint(pubkey_b64: str) -> str:
    """
    Compute a stable fingerprint for an Ed25519 public key.

    - Input: base64-encoded Ed25519 public key
    - Output: hex-encoded SHA256 hash (truncated to 32 chars for readability)
    """

    raw = b64d(pubkey_b64)
    digest = sha256(raw)
    return digest[:32]
