# accounting/models.py
"""
Ledger models.

All writes go through the command layer (accounting/commands.py and the
sales/purchases/assets commands that post through it). Views only read.

Models:
- CompanySequence: per-company counters for document numbers
- Account: chart of accounts
- BankAccount: a bank account linked to an asset ledger account
- Transaction: a business transaction header (invoice posting, payment,
  depreciation, manual journal...) carrying its VAT breakdown
- LedgerEntry: one debit or credit line of a Transaction
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from accounts.models import Company


class CompanySequence(models.Model):
    """
    Per-company counters for sequential identifiers.

    Commands allocate numbers with select_for_update (see
    accounting.commands.next_company_sequence).
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="sequences",
    )
    name = models.CharField(max_length=100)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_company_sequence_name",
            ),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.name}={self.next_value}"


class Account(models.Model):
    """
    Chart of Accounts entry.

    Codes follow the usual SA small-business layout: 1xxx assets, 2xxx
    liabilities, 3xxx equity, 4xxx income, 5xxx-9xxx expenses.
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        INCOME = "INCOME", "Income"
        EXPENSE = "EXPENSE", "Expense"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.INCOME: NormalBalance.CREDIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
    }

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=20, choices=AccountType.choices)
    normal_balance = models.CharField(
        max_length=10,
        choices=NormalBalance.choices,
        editable=False,
    )
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_code_per_company",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["company", "account_type"]),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        # Normal balance always follows the account type.
        self.normal_balance = self.NORMAL_BALANCE_MAP.get(
            self.account_type,
            self.NormalBalance.DEBIT,
        )
        super().save(*args, **kwargs)

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.NormalBalance.DEBIT

    def signed_balance(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Balance in the account's natural direction."""
        if self.is_debit_normal:
            return debit - credit
        return credit - debit


class BankAccount(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="bank_accounts",
    )
    name = models.CharField(max_length=255)
    bank_name = models.CharField(max_length=255, blank=True, default="")
    account_number = models.CharField(max_length=50, blank=True, default="")
    ledger_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="bank_accounts",
        help_text="Asset account postings go to (defaults to 1100 Bank)",
    )
    opening_balance = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    current_balance = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.bank_name})" if self.bank_name else self.name


class Transaction(models.Model):
    """
    Business transaction header.

    A POSTED transaction always has balanced LedgerEntry rows. The VAT
    fields drive the VAT201 return; ``total_amount`` is VAT-inclusive when
    ``vat_inclusive`` is set.
    """

    class TransactionType(models.TextChoices):
        SALES = "SALES", "Sales invoice"
        RECEIPT = "RECEIPT", "Customer receipt"
        INCOME = "INCOME", "Other income"
        PURCHASE = "PURCHASE", "Purchase order"
        BILL = "BILL", "Supplier bill"
        EXPENSE = "EXPENSE", "Expense"
        PAYMENT = "PAYMENT", "Supplier payment"
        CREDIT_NOTE = "CREDIT_NOTE", "Credit note"
        JOURNAL = "JOURNAL", "Manual journal"
        DEPRECIATION = "DEPRECIATION", "Depreciation"
        ASSET_PURCHASE = "ASSET_PURCHASE", "Asset purchase"
        ASSET_DISPOSAL = "ASSET_DISPOSAL", "Asset disposal"
        OPENING_BALANCE = "OPENING_BALANCE", "Opening balance"
        REVERSAL = "REVERSAL", "Reversal"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        POSTED = "POSTED", "Posted"
        REJECTED = "REJECTED", "Rejected"
        REVERSED = "REVERSED", "Reversed"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    date = models.DateField(db_index=True)
    description = models.CharField(max_length=500, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.POSTED)

    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    vat_rate = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    base_amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Amount excluding VAT, when known",
    )
    vat_inclusive = models.BooleanField(default=False)

    bank_account = models.ForeignKey(
        BankAccount,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="transactions",
    )
    reverses = models.OneToOneField(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="reversed_by",
    )

    # Originating document, e.g. ("Invoice", 12)
    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.BigIntegerField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["company", "date"]),
            models.Index(fields=["company", "transaction_type", "status"]),
            models.Index(fields=["company", "source_type", "source_id"]),
        ]

    def __str__(self):
        return f"{self.date} {self.get_transaction_type_display()} {self.total_amount}"


class LedgerEntry(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="ledger_entries",
    )
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="entries",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="entries",
    )
    line_no = models.PositiveIntegerField(default=1)
    entry_date = models.DateField(db_index=True)
    description = models.CharField(max_length=500, blank=True, default="")
    debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    is_reversed = models.BooleanField(default=False)

    class Meta:
        ordering = ["entry_date", "transaction_id", "line_no"]
        indexes = [
            models.Index(fields=["company", "account", "entry_date"]),
        ]

    def __str__(self):
        return f"{self.account.code} Dr {self.debit} Cr {self.credit}"

    def clean(self):
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit and credit cannot be negative.")
        if self.debit > 0 and self.credit > 0:
            raise ValidationError("A ledger line cannot have both debit and credit.")
        if self.account.company_id != self.company_id:
            raise ValidationError("Account must belong to the transaction's company.")


class DocumentLine(models.Model):
    """One priced line of a sales or purchase document."""

    line_no = models.PositiveIntegerField(default=1)
    description = models.CharField(max_length=500, blank=True, default="")
    quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("1"))
    unit_price = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    tax_rate = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        abstract = True
        ordering = ["line_no"]

    @property
    def total(self) -> Decimal:
        return self.amount + self.tax_amount
