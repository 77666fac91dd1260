"""Exceptions raised by the export/import codec and transfer pipeline."""


class TransferError(Exception):
    """Base class for every export/import failure."""


class EncodingError(TransferError, ValueError):
    """Raised when text cannot be converted to bytes in the fixed encoding."""


class MalformedDataError(TransferError, ValueError):
    """Raised when decrypted plaintext or a blob is structurally invalid."""


class AuthenticationError(TransferError):
    """Raised when the GCM tag does not verify.

    A wrong passphrase and a tampered file look the same from here.
    """


class EncryptionError(TransferError):
    """Raised when a cryptographic precondition is violated (e.g. key size)."""


class EmptyPassphraseError(TransferError, ValueError):
    """Raised when empty passphrases are disabled in config."""


class TransferBusyError(TransferError, RuntimeError):
    """Raised when an export or import is triggered while another is running."""
