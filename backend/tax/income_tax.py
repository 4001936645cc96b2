# tax/income_tax.py
"""
Corporate income tax computation.

    adjusted taxable income = profit before tax
                              + (non-deductible expenses - non-taxable income)
                              + (temporary increases - temporary decreases)
    current tax  = max(0, adjusted) x rate
    deferred tax = net temporary differences x rate
"""

from collections import namedtuple

from accounting.amounts import ZERO, money, percent_of, to_decimal

TaxComputation = namedtuple(
    "TaxComputation",
    [
        "profit_before_tax",
        "net_permanent",
        "net_temporary",
        "adjusted_taxable_income",
        "taxable_income",
        "rate",
        "current_tax",
        "deferred_tax",
        "total_tax",
    ],
)


def compute_income_tax(
    profit_before_tax,
    non_deductible=ZERO,
    non_taxable=ZERO,
    temporary_increase=ZERO,
    temporary_decrease=ZERO,
    rate=27,
) -> TaxComputation:
    pbt = to_decimal(profit_before_tax)
    rate = to_decimal(rate)

    net_permanent = to_decimal(non_deductible) - to_decimal(non_taxable)
    net_temporary = to_decimal(temporary_increase) - to_decimal(temporary_decrease)
    adjusted = pbt + net_permanent + net_temporary
    taxable = max(ZERO, adjusted)

    current_tax = percent_of(taxable, rate)
    deferred_tax = percent_of(net_temporary, rate)

    return TaxComputation(
        profit_before_tax=money(pbt),
        net_permanent=money(net_permanent),
        net_temporary=money(net_temporary),
        adjusted_taxable_income=money(adjusted),
        taxable_income=money(taxable),
        rate=rate,
        current_tax=current_tax,
        deferred_tax=deferred_tax,
        total_tax=money(current_tax + deferred_tax),
    )
