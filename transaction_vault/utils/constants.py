"""
================================================================================
CONSTANTS - System-Wide Configuration Values
================================================================================

Centralized repository for the hardcoded values used by the transaction
vault. Organized by functional category.

Constant Categories:
    1. File Paths - Directory and file locations
    2. Encrypted Blob Layout - AES-GCM nonce/tag/key sizes
    3. Key Derivation - Passphrase hashing parameters
    4. Transfer - Export artifact naming and user-facing messages

Key Constants:

    Encrypted Blob Layout:
        NONCE_SIZE = 12
            96-bit GCM nonce, first bytes of every blob

        TAG_SIZE = 16
            128-bit GCM authentication tag, last bytes of every blob

        MIN_BLOB_SIZE = 28
            Smallest well-formed blob (empty plaintext)

    Key Derivation:
        KEY_DERIVATION_ITERATIONS = 1
            Single SHA-256 pass. No stretching, no salt. Kept for
            compatibility with already exported files.

File Path Constants:
    All paths are relative to BASE_DIR (current working directory)
    Supports monkeypatching for test isolation

Usage:
    from transaction_vault.utils.constants import NONCE_SIZE, DB_FILE

Note:
    Values in this file are STATIC. For runtime-configurable settings,
    use config.json via transaction_vault.utils.config module.

================================================================================
"""

from pathlib import Path

# ==========================================
# FILE PATHS
# ==========================================
BASE_DIR = Path.cwd()
OUTPUT_DIR = BASE_DIR / 'outputs'
LOG_DIR = OUTPUT_DIR / 'logs'
EXPORT_DIR = OUTPUT_DIR / 'exports'
DB_FILE = BASE_DIR / 'transactions.db'
CONFIG_FILE = BASE_DIR / 'configs' / 'config.json'

# ==========================================
# ENCRYPTED BLOB LAYOUT
# ==========================================
"""
nonce(12) || ciphertext(N) || tag(16), no header
"""
NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16  # 128-bit GCM tag
KEY_SIZE = 32  # SHA-256 digest length, selects AES-256
MIN_BLOB_SIZE = NONCE_SIZE + TAG_SIZE
VALID_KEY_SIZES = (16, 24, 32)

# ==========================================
# KEY DERIVATION
# ==========================================
"""
Known weakness: one unsalted hash pass. Changing it breaks existing exports.
"""
PASSPHRASE_ENCODING = 'utf-8'
KEY_DERIVATION_HASH = 'SHA256'
KEY_DERIVATION_ITERATIONS = 1
KEY_DERIVATION_SALT = None

# ==========================================
# TRANSFER
# ==========================================
DEFAULT_EXPORT_FILENAME = 'Transactions'
EXPORT_CONTENT_TYPE = 'application/octet-stream'
PLAINTEXT_ENCODING = 'utf-8'

EXPORT_FAILED_MESSAGE = 'Exporting Failed!'
IMPORT_FAILED_MESSAGE = 'Import Failed, Check whether the key is typed correctly.'

# ==========================================
# SAMPLE DATA
# ==========================================
SAMPLE_EXPENSES = [
    ('Apple Studio Display', 1799.0),
    ('Mac Studio', 2199.0),
    ('iPhone 15 (Pink)', 799.0),
    ('Apple Watch', 499.0),
]
SAMPLE_INCOME = ('Project', 1399.0)
