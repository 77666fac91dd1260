"""
================================================================================
ENCRYPTION UTILITIES - Passphrase Keys and Sealed Transaction Blobs
================================================================================

Protects exported transactions with a user-supplied passphrase.

Encryption Technology:
    - Algorithm: AES-GCM (AES-256 with the derived key)
    - Nonce: 12 random bytes per encryption (os.urandom)
    - Tag: 16 bytes, verified before any plaintext is returned
    - Associated data: none

Key Derivation:
    key = SHA-256(passphrase.encode('utf-8'))

    A single unsalted hash pass. There is no stretching, so a weak
    passphrase can be brute-forced offline. Exported files depend on this
    exact derivation; strengthening it would make them unreadable.

Blob Layout (no header):
    nonce(12) || ciphertext(N) || tag(16)      total N + 28 bytes

Failure Modes:
    - EncodingError: passphrase cannot be encoded as UTF-8
    - EncryptionError: key is not 16/24/32 bytes
    - MalformedDataError: blob shorter than 28 bytes
    - AuthenticationError: tag mismatch (wrong passphrase or tampered file)

================================================================================
"""

import os
import logging
from typing import Iterable, List

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from transaction_vault.core.errors import (
    AuthenticationError,
    EncodingError,
    EncryptionError,
    MalformedDataError,
)
from transaction_vault.core.models import Transaction
from transaction_vault.core.serialization import decode_transactions, encode_transactions
from transaction_vault.utils.constants import (
    KEY_DERIVATION_HASH,
    MIN_BLOB_SIZE,
    NONCE_SIZE,
    PASSPHRASE_ENCODING,
    TAG_SIZE,
    VALID_KEY_SIZES,
)

logger = logging.getLogger("transaction_vault")


class TransactionEncryption:
    """
    Passphrase-keyed AES-GCM sealing of opaque byte payloads.

    Stateless: keys are derived per call and never stored.
    """

    @staticmethod
    def derive_key(passphrase: str) -> bytes:
        """
        Derive a 32-byte AES key from a passphrase.

        Args:
            passphrase: User passphrase. Empty is allowed and deterministic.

        Returns:
            SHA-256 digest of the UTF-8 passphrase
        """
        if not isinstance(passphrase, str):
            raise EncodingError(f"Passphrase must be text, got {type(passphrase).__name__}")
        try:
            material = passphrase.encode(PASSPHRASE_ENCODING)
        except UnicodeEncodeError as e:
            raise EncodingError(f"Passphrase cannot be encoded as {PASSPHRASE_ENCODING}") from e

        digest = hashes.Hash(getattr(hashes, KEY_DERIVATION_HASH)())
        digest.update(material)
        return digest.finalize()

    @staticmethod
    def _cipher(key: bytes) -> AESGCM:
        if not isinstance(key, (bytes, bytearray)):
            raise EncryptionError(f"Key must be bytes, got {type(key).__name__}")
        if len(key) not in VALID_KEY_SIZES:
            raise EncryptionError(f"Invalid AES key length: {len(key)} bytes")
        try:
            return AESGCM(bytes(key))
        except (TypeError, ValueError) as e:
            raise EncryptionError(f"Cipher setup failed: {e}") from e

    @staticmethod
    def seal(plaintext: bytes, key: bytes) -> bytes:
        """
        Encrypt and authenticate plaintext under key.

        Args:
            plaintext: Bytes to protect, any length
            key: 16, 24 or 32 byte AES key

        Returns:
            nonce || ciphertext || tag
        """
        cipher = TransactionEncryption._cipher(key)
        nonce = os.urandom(NONCE_SIZE)
        try:
            # AESGCM appends the tag to the ciphertext
            sealed = cipher.encrypt(nonce, bytes(plaintext), None)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncryptionError(f"Encryption failed: {e}") from e
        return nonce + sealed

    @staticmethod
    def open_sealed(blob: bytes, key: bytes) -> bytes:
        """
        Verify and decrypt a combined blob.

        Args:
            blob: nonce || ciphertext || tag
            key: Key the blob was sealed with

        Returns:
            Original plaintext bytes

        Raises:
            MalformedDataError: blob is too short to hold nonce and tag
            AuthenticationError: tag does not verify
        """
        if not isinstance(blob, (bytes, bytearray, memoryview)):
            raise MalformedDataError(f"Blob must be bytes, got {type(blob).__name__}")
        blob = bytes(blob)
        if len(blob) < MIN_BLOB_SIZE:
            raise MalformedDataError(
                f"Blob is {len(blob)} bytes, at least {MIN_BLOB_SIZE} required"
            )

        cipher = TransactionEncryption._cipher(key)
        nonce = blob[:NONCE_SIZE]
        ciphertext_and_tag = blob[NONCE_SIZE:]
        try:
            return cipher.decrypt(nonce, ciphertext_and_tag, None)
        except InvalidTag as e:
            raise AuthenticationError("Wrong key or corrupted data") from e

    @staticmethod
    def split_blob(blob: bytes):
        """
        Split a blob into (nonce, ciphertext, tag) without decrypting.

        Raises:
            MalformedDataError: blob is too short
        """
        if not isinstance(blob, (bytes, bytearray, memoryview)):
            raise MalformedDataError(f"Blob must be bytes, got {type(blob).__name__}")
        blob = bytes(blob)
        if len(blob) < MIN_BLOB_SIZE:
            raise MalformedDataError(
                f"Blob is {len(blob)} bytes, at least {MIN_BLOB_SIZE} required"
            )
        return blob[:NONCE_SIZE], blob[NONCE_SIZE:-TAG_SIZE], blob[-TAG_SIZE:]


# ====================================================================================
# MODULE-LEVEL HELPERS
# ====================================================================================

derive_key = TransactionEncryption.derive_key
seal = TransactionEncryption.seal
open_sealed = TransactionEncryption.open_sealed
split_blob = TransactionEncryption.split_blob


def encrypt_transactions(records: Iterable[Transaction], passphrase: str) -> bytes:
    """Encode transactions and seal them under the passphrase key."""
    records = list(records)
    plaintext = encode_transactions(records)
    blob = seal(plaintext, derive_key(passphrase))
    logger.debug(f"[ENCRYPTION] Sealed {len(records)} transactions: {len(plaintext)} -> {len(blob)} bytes")
    return blob


def decrypt_transactions(blob: bytes, passphrase: str) -> List[Transaction]:
    """Open a sealed blob and decode the transactions inside."""
    plaintext = open_sealed(blob, derive_key(passphrase))
    records = decode_transactions(plaintext)
    logger.debug(f"[ENCRYPTION] Opened blob: {len(records)} transactions")
    return records
