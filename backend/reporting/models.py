# reporting/models.py
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from accounts.models import Company


class TrialBalanceLine(models.Model):
    """
    Manually captured trial balance line.

    Independent of the ledger; used for balances brought in from another
    system before opening entries are posted.
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="trial_balance_lines")
    account_code = models.CharField(max_length=20)
    account_name = models.CharField(max_length=255)
    debit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(0)],
    )
    credit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(0)],
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
        ordering = ["account_code", "id"]

    def __str__(self):
        return f"{self.account_code} {self.account_name}"
