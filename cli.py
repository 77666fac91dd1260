#!/usr/bin/env python3
"""
================================================================================
CLI - Command Line Interface
================================================================================

Command-line access to the transaction vault:
    - Add, list, summarize and delete transactions
    - Seed sample data
    - Export all transactions to a passphrase-encrypted file
    - Import an encrypted file back into the local store

Usage:
    python cli.py [command] [options]
    python cli.py --help

================================================================================
"""

import sys
import math
import argparse
from datetime import datetime
from pathlib import Path
from typing import Optional

from getpass import getpass

from transaction_vault.core.database import DatabaseManager
from transaction_vault.core.models import Category, Transaction
from transaction_vault.core.sample_data import seed_transactions
from transaction_vault.core.transfer import TransferSession
from transaction_vault.utils.config import load_config
from transaction_vault.utils.constants import EXPORT_DIR
from transaction_vault.utils.logger import setup_logging


# ANSI color codes
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_header(text):
    """Print formatted header"""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text:^70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}\n")


def print_success(text):
    """Print success message"""
    print(f"{Colors.GREEN}✓{Colors.ENDC} {text}")


def print_error(text):
    """Print error message"""
    print(f"{Colors.RED}✗{Colors.ENDC} {text}")


def print_info(text):
    """Print info message"""
    print(f"{Colors.CYAN}ℹ{Colors.ENDC} {text}")


def _open_store(args) -> DatabaseManager:
    db = getattr(args, 'db', None)
    return DatabaseManager(Path(db) if db else None)


def _read_passphrase(args) -> str:
    key = getattr(args, 'key', None)
    if key is not None:
        return key
    return getpass('Enter Key: ')


def _format_transaction(t: Transaction) -> str:
    arrow = '↑' if t.is_expense else '↓'
    color = Colors.RED if t.is_expense else Colors.GREEN
    return (f"{t.date.strftime('%b %d, %Y'):<14} {t.name:<32} "
            f"{color}{arrow} $ {int(t.amount)}{Colors.ENDC}  [{t.id}]")


# ==================================
# TRANSACTION MANAGEMENT
# ==================================

def cmd_add(args):
    try:
        date = datetime.fromisoformat(args.date) if args.date else datetime.now()
    except ValueError:
        print_error(f"Invalid date: {args.date}")
        return False
    if not math.isfinite(args.amount):
        print_error(f"Invalid amount: {args.amount}")
        return False

    record = Transaction(
        name=args.name,
        date=date,
        amount=args.amount,
        category=Category(args.category),
    )
    with _open_store(args) as store:
        stored = store.insert(record)
    print_success(f"Transaction created with id {stored.id}")
    return True


def cmd_seed(args):
    with _open_store(args) as store:
        stored = seed_transactions(store)
    print_success(f"Added {len(stored)} sample transaction(s)")
    return True


def cmd_list(args):
    with _open_store(args) as store:
        records = store.get_all()
    print_header("TRANSACTIONS")
    if not records:
        print_info("No transactions yet. Try 'seed' or 'add'.")
        return True
    for t in records:
        print(_format_transaction(t))
    return True


def summarize(store: DatabaseManager) -> dict:
    """Totals per category and net balance."""
    df = store.get_frame()
    totals = df.groupby('category')['amount'].sum() if not df.empty else {}
    expense = float(totals.get(Category.EXPENSE.value, 0.0))
    income = float(totals.get(Category.INCOME.value, 0.0))
    return {
        'count': int(len(df)),
        'expense': expense,
        'income': income,
        'net': income - expense,
    }


def cmd_summary(args):
    with _open_store(args) as store:
        summary = summarize(store)
    print_header("SUMMARY")
    print(f"Transactions: {summary['count']}")
    print(f"Income:       {Colors.GREEN}{summary['income']:.2f}{Colors.ENDC}")
    print(f"Expenses:     {Colors.RED}{summary['expense']:.2f}{Colors.ENDC}")
    print(f"Net:          {summary['net']:.2f}")
    return True


def cmd_delete(args):
    with _open_store(args) as store:
        removed = store.delete(args.id)
    if not removed:
        print_error(f"Transaction {args.id} not found")
        return False
    print_success(f"Transaction {args.id} deleted")
    return True


# ==================================
# EXPORT / IMPORT
# ==================================

def _default_destination(config: dict) -> Path:
    return EXPORT_DIR / config['transfer']['default_filename']


def cmd_export(args, config: Optional[dict] = None):
    config = config if config is not None else load_config()
    destination = Path(args.output) if args.output else _default_destination(config)
    passphrase = _read_passphrase(args)

    with _open_store(args) as store:
        session = TransferSession(store, config=config)
        result = session.run_export(passphrase=passphrase, destination=destination)

    if result is None:
        print_error(session.alert_message)
        return False
    print_success(f"Exported {result.count} transaction(s) to {session.last_export_path}")
    return True


def cmd_import(args, config: Optional[dict] = None):
    config = config if config is not None else load_config()
    source = Path(args.file)
    if not source.exists():
        print_error(f"File not found at {source}")
        return False
    passphrase = _read_passphrase(args)

    with _open_store(args) as store:
        session = TransferSession(store, config=config)
        stored = session.run_import(source=source, passphrase=passphrase)

    if stored is None:
        print_error(session.alert_message)
        return False
    print_success(f"Imported {len(stored)} transaction(s) from {source.name}")
    return True


def build_parser():
    parser = argparse.ArgumentParser(
        description='Transaction Vault - Encrypted Transaction Export/Import',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s seed                          # Add sample transactions
  %(prog)s add --name Desk --amount 199  # Add an expense
  %(prog)s list                          # Show transactions, newest first
  %(prog)s export --output backup.bin    # Encrypt all transactions to a file
  %(prog)s import backup.bin             # Decrypt a file into the store
        '''
    )
    parser.add_argument('--db', help='Path to the transaction database')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    p_add = subparsers.add_parser('add', help='Add a transaction')
    p_add.add_argument('--name', required=True, help='Transaction name')
    p_add.add_argument('--amount', required=True, type=float, help='Amount')
    p_add.add_argument('--date', help='ISO date/time (default: now)')
    p_add.add_argument('--category', choices=[c.value for c in Category],
                       default=Category.EXPENSE.value, help='expense or income')
    p_add.set_defaults(func=cmd_add)

    p_seed = subparsers.add_parser('seed', help='Add sample transactions')
    p_seed.set_defaults(func=cmd_seed)

    p_list = subparsers.add_parser('list', help='List transactions')
    p_list.set_defaults(func=cmd_list)

    p_summary = subparsers.add_parser('summary', help='Totals per category')
    p_summary.set_defaults(func=cmd_summary)

    p_delete = subparsers.add_parser('delete', help='Delete a transaction')
    p_delete.add_argument('id', help='Transaction id')
    p_delete.set_defaults(func=cmd_delete)

    p_export = subparsers.add_parser('export', help='Export transactions to an encrypted file')
    p_export.add_argument('--output', help='Destination file or directory')
    p_export.add_argument('--key', help='Passphrase (prompted when omitted)')
    p_export.set_defaults(func=cmd_export)

    p_import = subparsers.add_parser('import', help='Import transactions from an encrypted file')
    p_import.add_argument('file', help='Encrypted export file')
    p_import.add_argument('--key', help='Passphrase (prompted when omitted)')
    p_import.set_defaults(func=cmd_import)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = load_config()
    setup_logging('cli', level=config['logging']['level'])

    try:
        success = args.func(args)
        return 0 if success else 1
    except KeyboardInterrupt:
        print_info("\nOperation cancelled by user")
        return 130
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
