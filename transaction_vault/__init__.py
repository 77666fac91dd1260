"""
================================================================================
TRANSACTION VAULT - Passphrase-Protected Transaction Export/Import
================================================================================

Package Structure:
    transaction_vault/core/   - Records, codec, encryption, store, transfer
    transaction_vault/utils/  - Logging, config, constants

================================================================================
"""

__version__ = "2025.1"
