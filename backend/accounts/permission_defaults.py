# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "OWNER": {
        # Company / security
        "company.switch",
        "company.view",
        "company.manage_settings",
        "company.manage_users",

        # Ledger
        "accounts.view",
        "accounts.manage",
        "journal.view",
        "journal.post",
        "journal.reverse",
        "banking.view",
        "banking.manage",

        # Sales / purchases
        "sales.view",
        "sales.manage",
        "sales.receive_payment",
        "purchases.view",
        "purchases.manage",
        "purchases.pay",

        # Tax, assets, budgets
        "tax.view",
        "assets.view",
        "assets.manage",
        "assets.depreciate",
        "budgets.view",
        "budgets.manage",

        # Reports / audit
        "reports.view",
        "reports.export",
        "trial_balance.manage",
        "audit.view",

        "messages.use",
    },
    "ADMIN": {
        "company.switch",
        "company.view",
        "company.manage_settings",
        "company.manage_users",

        "accounts.view",
        "accounts.manage",
        "journal.view",
        "journal.post",
        "journal.reverse",
        "banking.view",
        "banking.manage",

        "sales.view",
        "sales.manage",
        "sales.receive_payment",
        "purchases.view",
        "purchases.manage",
        "purchases.pay",

        "tax.view",
        "assets.view",
        "assets.manage",
        "assets.depreciate",
        "budgets.view",
        "budgets.manage",

        "reports.view",
        "reports.export",
        "trial_balance.manage",
        "audit.view",

        "messages.use",
    },
    "ACCOUNTANT": {
        "company.switch",
        "company.view",

        "accounts.view",
        "accounts.manage",
        "journal.view",
        "journal.post",
        "journal.reverse",
        "banking.view",

        "sales.view",
        "sales.manage",
        "sales.receive_payment",
        "purchases.view",
        "purchases.manage",
        "purchases.pay",

        "tax.view",
        "assets.view",
        "assets.manage",
        "assets.depreciate",
        "budgets.view",
        "budgets.manage",

        "reports.view",
        "reports.export",
        "trial_balance.manage",

        "messages.use",
    },
    "USER": {
        "company.switch",
        "company.view",

        "accounts.view",
        "journal.view",
        "banking.view",

        "sales.view",
        "sales.manage",
        "purchases.view",
        "purchases.manage",

        "assets.view",
        "budgets.view",
        "reports.view",

        "messages.use",
    },
    "VIEWER": {
        "company.switch",
        "company.view",

        "accounts.view",
        "journal.view",
        "sales.view",
        "purchases.view",
        "assets.view",
        "budgets.view",
        "reports.view",

        "messages.use",
    },
}


def all_permission_codes() -> set[str]:
    codes: set[str] = set()
    for s in ROLE_DEFAULTS.values():
        codes |= set(s)
    return codes
