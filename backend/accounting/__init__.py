# accounting/__init__.py
"""
Accounting app - Double-entry bookkeeping for Rigel.

This app provides:
- Account: Chart of accounts with standard South African SME codes
- BankAccount: Company bank accounts and their running balances
- Transaction / LedgerEntry: Posted journals and their debit/credit lines
- CompanySequence: Per-company document numbering (INV-000001, ...)

Commands handle all mutations to ensure events are emitted.
"""

default_app_config = "accounting.apps.AccountingConfig"
