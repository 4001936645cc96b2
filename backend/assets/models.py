# assets/models.py
"""
Fixed asset register.

``accumulated_depreciation`` is the amount already posted to the ledger;
the calculated figure for any date comes from assets/depreciation.py.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from accounts.models import Company
from accounting.models import Account, Transaction

ZERO = Decimal("0.00")


class FixedAsset(models.Model):
    class Method(models.TextChoices):
        STRAIGHT_LINE = "STRAIGHT_LINE", "Straight line"

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        ACTIVE = "ACTIVE", "Active"
        DISPOSED = "DISPOSED", "Disposed"
        SOLD = "SOLD", "Sold"
        SCRAPPED = "SCRAPPED", "Scrapped"

    class FundingSource(models.TextChoices):
        BANK = "bank", "Bank"
        LOAN = "loan", "Loan"
        OPENING = "opening", "Opening balance"

    DISPOSED_STATUSES = (Status.DISPOSED, Status.SOLD, Status.SCRAPPED)

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="fixed_assets")
    description = models.CharField(max_length=255)
    cost = models.DecimalField(max_digits=18, decimal_places=2, validators=[MinValueValidator(0)])
    purchase_date = models.DateField()
    useful_life_years = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    depreciation_method = models.CharField(max_length=20, choices=Method.choices, default=Method.STRAIGHT_LINE)
    accumulated_depreciation = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    last_depreciation_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    funding_source = models.CharField(max_length=10, choices=FundingSource.choices, default=FundingSource.BANK)

    asset_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="fixed_assets",
    )
    acquisition_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="acquired_asset",
    )

    disposal_date = models.DateField(null=True, blank=True)
    disposal_amount = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    disposal_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="disposed_asset",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-purchase_date", "-id"]
        indexes = [models.Index(fields=["company", "status"])]

    def __str__(self):
        return self.description

    @property
    def net_book_value(self) -> Decimal:
        return self.cost - self.accumulated_depreciation

    @property
    def is_disposed(self) -> bool:
        return self.status in self.DISPOSED_STATUSES
