"""
veriage_core.utils
------------------
Lightweight helpers for random ids, timestamping, base64 utilities, hashing
and canonical JSON serialization.
All digests in the proof, credential and ledger services go through sha256().
"""

from __future__ import annotations
import base64, json, time, hashlib, secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"), validate=True)

def now_ms() -> int:
    return int(time.time() * 1000)

def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def from_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)

def to_ms(dt: datetime) -> int:
    return (dt - EPOCH) // timedelta(milliseconds=1)

def iso_ms(dt: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision, e.g. 2000-01-01T00:00:00.000Z"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return (f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T"
            f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z")

def parse_iso(s: str) -> datetime:
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def random_hex(nbytes: int) -> str:
    return secrets.token_hex(nbytes)

def canonical_json(obj: Dict[str, Any]) -> bytes:
    # Deterministic, minimal JSON for hashing
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
