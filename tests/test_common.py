"""Shared helpers for the test suite."""

from transaction_vault.core.database import _sort_key
from transaction_vault.core.encryption import derive_key, seal


def strip_ids(records):
    """Comparable view of records without storage identity."""
    return [(r.name, r.date, r.amount, r.category) for r in records]


def newest_first(records):
    return sorted(records, key=lambda r: _sort_key(r.date), reverse=True)


def seal_plaintext(plaintext: bytes, passphrase: str) -> bytes:
    """Seal arbitrary bytes the way an export would."""
    return seal(plaintext, derive_key(passphrase))
