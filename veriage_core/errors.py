from __future__ import annotations


class VeriageError(Exception):
    pass


class ThresholdNotMet(VeriageError):
    """Derived age is below the requested threshold; no proof is issued."""


class MalformedToken(VeriageError):
    """A serialized proof or credential could not be decoded."""


class UnknownIdentifier(VeriageError):
    pass


class UnknownReference(VeriageError):
    """Lookup by a credential id or ledger reference that was never issued."""
