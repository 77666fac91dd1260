"""
================================================================================
CORE MODULE - Encrypted Transaction Transfer
================================================================================

Exported Classes:
    Transaction, Category - Transaction record model
    DatabaseManager - SQLite transaction store
    TransactionEncryption - Passphrase key derivation and AES-GCM sealing
    TransferSession - Interactive export/import driver

Exported Functions:
    Codec:
        - derive_key, seal, open_sealed
        - encode_transactions, decode_transactions
        - encrypt_transactions, decrypt_transactions
    Pipeline:
        - export_transactions, import_transactions, write_export

Usage:
    from transaction_vault.core import DatabaseManager, TransferSession

================================================================================
"""

from transaction_vault.core.errors import (
    TransferError,
    EncodingError,
    MalformedDataError,
    AuthenticationError,
    EncryptionError,
    EmptyPassphraseError,
    TransferBusyError,
)
from transaction_vault.core.models import Category, Transaction
from transaction_vault.core.serialization import encode_transactions, decode_transactions
from transaction_vault.core.encryption import (
    TransactionEncryption,
    derive_key,
    seal,
    open_sealed,
    encrypt_transactions,
    decrypt_transactions,
)
from transaction_vault.core.database import DatabaseManager
from transaction_vault.core.transfer import (
    ExportResult,
    TransferSession,
    TransferState,
    export_transactions,
    import_transactions,
    write_export,
)

__all__ = [
    'TransferError',
    'EncodingError',
    'MalformedDataError',
    'AuthenticationError',
    'EncryptionError',
    'EmptyPassphraseError',
    'TransferBusyError',
    'Category',
    'Transaction',
    'encode_transactions',
    'decode_transactions',
    'TransactionEncryption',
    'derive_key',
    'seal',
    'open_sealed',
    'encrypt_transactions',
    'decrypt_transactions',
    'DatabaseManager',
    'ExportResult',
    'TransferSession',
    'TransferState',
    'export_transactions',
    'import_transactions',
    'write_export',
]
