# veriage_core/constants.py

PROOF_VERSION = 1
MAX_PROOF_AGE_MS = 24 * 60 * 60 * 1000          # 24 hours
BINDING_TAG_LEN = 16                            # hex chars kept from the sha256 digest

CREDENTIAL_TTL_MS = 365 * 24 * 60 * 60 * 1000   # 1 year
CREDENTIAL_CONTEXT = [
    "https://www.w3.org/2018/credentials/v1",
    "https://www.w3.org/2018/credentials/examples/v1",
]
CREDENTIAL_ISSUER = "did:example:issuer"
CREDENTIAL_VERIFICATION_METHOD = "did:example:issuer#keys-1"
CREDENTIAL_SIGNATURE_TYPE = "Ed25519Signature2020"

DID_METHOD = "did:example"
VERIFICATION_KEY_TYPE = "Ed25519VerificationKey2020"

LEDGER_ISSUER = "did:example:issuer123"
TX_REF_PREFIX = "tx_"

ATTESTATION_VALID = "valid"

# fresh-key allocation retries before giving up on a colliding random id
MAX_ID_ATTEMPTS = 8
