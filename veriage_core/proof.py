"""
veriage_core.proof
------------------
Commitment-based age threshold proofs.

A proof token carries a SHA-256 commitment to the birthdate, the threshold
being asserted, a random nonce, the issue time and a binding tag over all of
them. Verification recomputes the binding tag and never needs the birthdate.

Wire format: base64(JSON{"v","t","h","n","ts","s"}), where "s" is the first
16 hex chars of sha256(JSON{"v","t","h","n","ts"}) in that key order.

Known limitation: the commitment is an unsalted digest of the birthdate, so a
verifier who guesses a birthdate can recompute it and confirm the guess.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, datetime, time as dtime, timezone
from typing import Any, Callable, Dict, Optional, Union
import binascii, json

from .constants import PROOF_VERSION, MAX_PROOF_AGE_MS, BINDING_TAG_LEN
from .errors import ThresholdNotMet, MalformedToken
from .logger import get_logger
from .utils import b64e, b64d, sha256, iso_ms, from_ms, now_ms, random_hex

log = get_logger("Veriage.Proof")

DateLike = Union[date, datetime]


def _as_utc_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, dtime(0, 0), tzinfo=timezone.utc)
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def calculate_age(birthdate: DateLike, today: date) -> int:
    """Whole years between birthdate and today, minus one before this year's birthday."""
    born = _as_utc_datetime(birthdate).date()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def commit_birthdate(birthdate: DateLike) -> str:
    return sha256(iso_ms(_as_utc_datetime(birthdate)).encode("utf-8"))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ThresholdProof:
    version: int
    threshold: int
    commitment: str
    nonce: str
    issued_at: int
    binding_tag: str = ""

    def to_signing_bytes(self) -> bytes:
        # key order is part of the format; do not sort
        body = {
            "v": self.version,
            "t": self.threshold,
            "h": self.commitment,
            "n": self.nonce,
            "ts": self.issued_at,
        }
        return json.dumps(body, separators=(",", ":")).encode("utf-8")

    def compute_binding_tag(self) -> str:
        return sha256(self.to_signing_bytes())[:BINDING_TAG_LEN]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "v": self.version,
            "t": self.threshold,
            "h": self.commitment,
            "n": self.nonce,
            "ts": self.issued_at,
            "s": self.binding_tag,
        }

    def encode(self) -> str:
        return b64e(json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8"))

    @classmethod
    def decode(cls, token: str) -> "ThresholdProof":
        """Inverse of encode(). Raises MalformedToken on any structural problem."""
        if not isinstance(token, str):
            raise MalformedToken("proof token must be a string")
        try:
            data = json.loads(b64d(token).decode("utf-8"))
        except (binascii.Error, ValueError, UnicodeDecodeError) as e:
            raise MalformedToken(f"undecodable proof token: {e}") from e
        if not isinstance(data, dict):
            raise MalformedToken("proof token is not an object")

        for key in ("v", "t", "ts"):
            if not _is_int(data.get(key)):
                raise MalformedToken(f"field {key!r} missing or not an integer")
        for key in ("h", "n", "s"):
            if not isinstance(data.get(key), str):
                raise MalformedToken(f"field {key!r} missing or not a string")

        return cls(
            version=data["v"],
            threshold=data["t"],
            commitment=data["h"],
            nonce=data["n"],
            issued_at=data["ts"],
            binding_tag=data["s"],
        )


@dataclass(frozen=True)
class ProofCheck:
    ok: bool
    reason: str     # ok | malformed | unsupported_version | threshold_too_low | binding_mismatch | expired

    def __bool__(self) -> bool:
        return self.ok


class ProofService:
    """Stateless issuer/verifier for ThresholdProof tokens."""

    def __init__(self, clock: Optional[Callable[[], int]] = None, max_proof_age_ms: int = MAX_PROOF_AGE_MS):
        self.clock = clock or now_ms
        self.max_proof_age_ms = max_proof_age_ms

    def create(self, birthdate: DateLike, threshold: int) -> str:
        if not _is_int(threshold) or threshold < 0:
            raise ValueError("threshold must be a non-negative integer")

        now = self.clock()
        age = calculate_age(birthdate, from_ms(now).date())
        if age < threshold:
            log.info(f"proof refused: threshold {threshold} not met")
            raise ThresholdNotMet(f"age threshold {threshold} not met")

        proof = ThresholdProof(
            version=PROOF_VERSION,
            threshold=threshold,
            commitment=commit_birthdate(birthdate),
            nonce=random_hex(8),
            issued_at=now,
        )
        proof = replace(proof, binding_tag=proof.compute_binding_tag())
        log.info(f"proof issued for threshold {threshold}")
        return proof.encode()

    def decode(self, token: str) -> ThresholdProof:
        return ThresholdProof.decode(token)

    def check(self, token: str, required_threshold: int) -> ProofCheck:
        if not _is_int(required_threshold):
            return self._fail("malformed", "required threshold is not an integer")

        try:
            proof = ThresholdProof.decode(token)
        except MalformedToken as e:
            return self._fail("malformed", str(e))

        if proof.version != PROOF_VERSION:
            return self._fail("unsupported_version", f"version {proof.version}")

        if proof.threshold < required_threshold:
            return self._fail("threshold_too_low", f"{proof.threshold} < {required_threshold}")

        if proof.compute_binding_tag() != proof.binding_tag:
            return self._fail("binding_mismatch", "binding tag does not match proof fields")

        if self.clock() - proof.issued_at > self.max_proof_age_ms:
            return self._fail("expired", "proof older than freshness window")

        return ProofCheck(True, "ok")

    def verify(self, token: str, required_threshold: int) -> bool:
        return self.check(token, required_threshold).ok

    @staticmethod
    def _fail(reason: str, detail: str) -> ProofCheck:
        log.debug(f"proof rejected ({reason}): {detail}")
        return ProofCheck(False, reason)
