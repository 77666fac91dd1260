"""
================================================================================
TRANSFER - Encrypted Export/Import Pipeline
================================================================================

Runs the two user-facing operations over a transaction store.

Export:
    IDLE -> READING_RECORDS -> ENCODING -> ENCRYPTING -> READY_TO_WRITE -> IDLE
    records (newest first) -> canonical bytes -> sealed blob -> destination

Import:
    IDLE -> READING_BYTES -> DECRYPTING -> VERIFYING -> DECODING -> INSERTING -> IDLE
    file -> blob -> verified plaintext -> records -> store

Nothing reaches the store before the blob is verified and fully decoded,
and the insert itself is a single SQLite transaction.

TransferSession wraps the pipeline the way the interactive app drives it:
    - one operation at a time (TransferBusyError otherwise)
    - runs on a background thread via start_export()/start_import()
    - on_loading(True/False) at start and end
    - any failure is logged with its type, kept in last_error, and turned
      into one generic message per direction; the passphrase is cleared
    - store access serialized through a filelock next to the database

================================================================================
"""

import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Protocol, Union

import filelock

from transaction_vault.core.encryption import derive_key, open_sealed, seal
from transaction_vault.core.errors import EmptyPassphraseError, TransferBusyError
from transaction_vault.core.models import Transaction
from transaction_vault.core.serialization import decode_transactions, encode_transactions
from transaction_vault.utils.config import load_config
from transaction_vault.utils.constants import (
    DEFAULT_EXPORT_FILENAME,
    EXPORT_CONTENT_TYPE,
    EXPORT_FAILED_MESSAGE,
    IMPORT_FAILED_MESSAGE,
)

logger = logging.getLogger("transaction_vault")

ImportSource = Union[str, Path, bytes, BinaryIO]


class TransactionStore(Protocol):
    """What the pipeline needs from storage."""

    def get_all(self) -> List[Transaction]:
        ...

    def insert_many(self, records: List[Transaction]) -> List[Transaction]:
        ...


class TransferState(str, Enum):
    IDLE = "idle"
    READING_RECORDS = "reading_records"
    ENCODING = "encoding"
    ENCRYPTING = "encrypting"
    READY_TO_WRITE = "ready_to_write"
    READING_BYTES = "reading_bytes"
    DECRYPTING = "decrypting"
    VERIFYING = "verifying"
    DECODING = "decoding"
    INSERTING = "inserting"


@dataclass(frozen=True)
class ExportResult:
    """Sealed export ready to hand to a file-save collaborator."""
    data: bytes
    filename: str
    content_type: str
    count: int


StateCallback = Callable[[TransferState], None]


def _notify(on_state: Optional[StateCallback], state: TransferState):
    if on_state is not None:
        on_state(state)


def export_transactions(store: TransactionStore, passphrase: str,
                        filename: str = DEFAULT_EXPORT_FILENAME,
                        content_type: str = EXPORT_CONTENT_TYPE,
                        on_state: Optional[StateCallback] = None) -> ExportResult:
    """
    Read every record from the store and seal it under the passphrase.

    Args:
        store: Source of records; only get_all() is called
        passphrase: User passphrase
        filename: Suggested name for the saved file
        content_type: MIME type for the saved file
        on_state: Optional callback receiving each TransferState

    Returns:
        ExportResult with the combined blob
    """
    _notify(on_state, TransferState.READING_RECORDS)
    records = store.get_all()

    _notify(on_state, TransferState.ENCODING)
    plaintext = encode_transactions(records)

    _notify(on_state, TransferState.ENCRYPTING)
    blob = seal(plaintext, derive_key(passphrase))

    _notify(on_state, TransferState.READY_TO_WRITE)
    return ExportResult(data=blob, filename=filename, content_type=content_type, count=len(records))


def read_source(source: ImportSource) -> bytes:
    """
    Read all bytes from a path, raw bytes or a binary file-like object.

    Paths are opened and closed here on every exit path. File-like
    objects belong to the caller and are left open.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        with open(source, 'rb') as f:
            return f.read()
    return source.read()


def import_transactions(store: TransactionStore, source: ImportSource, passphrase: str,
                        on_state: Optional[StateCallback] = None) -> List[Transaction]:
    """
    Verify, decrypt and decode an exported file, then insert its records.

    Args:
        store: Destination; only insert_many() is called
        source: Path, bytes or binary file-like object holding the blob
        passphrase: Passphrase the file was exported with
        on_state: Optional callback receiving each TransferState

    Returns:
        The stored records, in file order
    """
    _notify(on_state, TransferState.READING_BYTES)
    blob = read_source(source)

    _notify(on_state, TransferState.DECRYPTING)
    key = derive_key(passphrase)

    _notify(on_state, TransferState.VERIFYING)
    plaintext = open_sealed(blob, key)

    _notify(on_state, TransferState.DECODING)
    records = decode_transactions(plaintext)

    _notify(on_state, TransferState.INSERTING)
    return store.insert_many(records)


def write_export(result: ExportResult, destination: Union[str, Path]) -> Path:
    """Write an export to a file, or into a directory under its suggested name."""
    dest = Path(destination)
    if dest.is_dir():
        dest = dest / result.filename
    dest.parent.mkdir(parents=True, exist_ok=True)
    with open(dest, 'wb') as f:
        f.write(result.data)
    return dest


class TransferSession:
    """
    Interactive export/import driver for one store.

    Holds the entered passphrase and pending import source between the
    prompt and the operation, the loading flag and the last alert message.
    """

    def __init__(self, store: TransactionStore, config: Optional[dict] = None,
                 on_loading: Optional[Callable[[bool], None]] = None,
                 on_state: Optional[StateCallback] = None):
        self.store = store
        self.config = config if config is not None else load_config()
        self.on_loading = on_loading
        self.on_state = on_state

        self.passphrase = ""
        self.import_source: Optional[ImportSource] = None
        self.is_loading = False
        self.state = TransferState.IDLE
        self.alert_message: Optional[str] = None
        self.last_error: Optional[BaseException] = None
        self.last_export_path: Optional[Path] = None

        self._busy = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # state helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: TransferState):
        self.state = state
        _notify(self.on_state, state)

    def _set_loading(self, status: bool):
        self.is_loading = status
        if self.on_loading is not None:
            self.on_loading(status)

    def _store_lock(self):
        lock_path = getattr(self.store, 'lock_path', None)
        if lock_path is None:
            return nullcontext()
        timeout = self.config.get('storage', {}).get('lock_timeout_seconds', 10)
        return filelock.FileLock(str(lock_path), timeout=timeout)

    def _acquire(self):
        if not self._busy.acquire(blocking=False):
            raise TransferBusyError("Another export or import is already running")

    def _check_passphrase(self, passphrase: str):
        if passphrase == "" and self.config.get('transfer', {}).get('reject_empty_passphrase', False):
            raise EmptyPassphraseError("Passphrase must not be empty")

    def _fail(self, direction: str, message: str, error: BaseException):
        logger.error(f"[{direction}] Failed ({type(error).__name__}): {error}")
        self.last_error = error
        self.alert_message = message
        self.passphrase = ""
        self.import_source = None
        self._set_state(TransferState.IDLE)
        self._set_loading(False)

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def cancel(self):
        """Dismiss the passphrase prompt without running anything."""
        self.passphrase = ""
        self.import_source = None

    def wait(self, timeout: Optional[float] = None):
        """Join the background thread started by start_export/start_import."""
        if self._thread is not None:
            self._thread.join(timeout)

    # ------------------------------------------------------------------
    # export
    # ------------------------------------------------------------------

    def _export(self, destination) -> Optional[ExportResult]:
        passphrase = self.passphrase
        transfer_cfg = self.config.get('transfer', {})
        self.last_error = None
        self.alert_message = None
        try:
            self._set_loading(True)
            self._check_passphrase(passphrase)
            with self._store_lock():
                result = export_transactions(
                    self.store,
                    passphrase,
                    filename=transfer_cfg.get('default_filename', DEFAULT_EXPORT_FILENAME),
                    content_type=transfer_cfg.get('content_type', EXPORT_CONTENT_TYPE),
                    on_state=self._set_state,
                )
            if destination is not None:
                self.last_export_path = write_export(result, destination)
                logger.info(f"[EXPORT] Wrote {result.count} transactions to {self.last_export_path}")
            else:
                logger.info(f"[EXPORT] Sealed {result.count} transactions ({len(result.data)} bytes)")
        except Exception as e:
            self._fail('EXPORT', EXPORT_FAILED_MESSAGE, e)
            return None
        self.passphrase = ""
        self._set_state(TransferState.IDLE)
        self._set_loading(False)
        return result

    def run_export(self, passphrase: Optional[str] = None,
                   destination: Optional[Union[str, Path]] = None) -> Optional[ExportResult]:
        """
        Export synchronously.

        Args:
            passphrase: Overrides the stored passphrase when given
            destination: File or directory to write to; None returns bytes only

        Returns:
            ExportResult, or None when the export failed (see alert_message)
        """
        self._acquire()
        try:
            if passphrase is not None:
                self.passphrase = passphrase
            return self._export(destination)
        finally:
            self._busy.release()

    def start_export(self, passphrase: Optional[str] = None,
                     destination: Optional[Union[str, Path]] = None) -> threading.Thread:
        """Export on a background thread. Returns the started thread."""
        self._acquire()
        if passphrase is not None:
            self.passphrase = passphrase

        def worker():
            try:
                self._export(destination)
            finally:
                self._busy.release()

        self._thread = threading.Thread(target=worker, name="transaction-export", daemon=True)
        self._thread.start()
        return self._thread

    # ------------------------------------------------------------------
    # import
    # ------------------------------------------------------------------

    def _import(self) -> Optional[List[Transaction]]:
        passphrase = self.passphrase
        source = self.import_source
        self.last_error = None
        self.alert_message = None
        try:
            self._set_loading(True)
            if source is None:
                raise FileNotFoundError("No import source selected")
            self._check_passphrase(passphrase)
            with self._store_lock():
                stored = import_transactions(self.store, source, passphrase, on_state=self._set_state)
            logger.info(f"[IMPORT] Inserted {len(stored)} transactions")
        except Exception as e:
            self._fail('IMPORT', IMPORT_FAILED_MESSAGE, e)
            return None
        self.passphrase = ""
        self.import_source = None
        self._set_state(TransferState.IDLE)
        self._set_loading(False)
        return stored

    def run_import(self, source: Optional[ImportSource] = None,
                   passphrase: Optional[str] = None) -> Optional[List[Transaction]]:
        """
        Import synchronously.

        Args:
            source: Path, bytes or binary file-like; overrides import_source
            passphrase: Overrides the stored passphrase when given

        Returns:
            Stored records, or None when the import failed (see alert_message)
        """
        self._acquire()
        try:
            if source is not None:
                self.import_source = source
            if passphrase is not None:
                self.passphrase = passphrase
            return self._import()
        finally:
            self._busy.release()

    def start_import(self, source: Optional[ImportSource] = None,
                     passphrase: Optional[str] = None) -> threading.Thread:
        """Import on a background thread. Returns the started thread."""
        self._acquire()
        if source is not None:
            self.import_source = source
        if passphrase is not None:
            self.passphrase = passphrase

        def worker():
            try:
                self._import()
            finally:
                self._busy.release()

        self._thread = threading.Thread(target=worker, name="transaction-import", daemon=True)
        self._thread.start()
        return self._thread
