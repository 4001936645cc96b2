# accounts/__init__.py
"""
Accounts app - Authentication and company membership for Rigel.

This app provides:
- Company: The business being accounted for, with its tax settings
- User: Custom user model with active_company
- CompanyMembership: User-Company relationship with a role
- AppPermission: Fine-grained permission codes granted per membership
- ActorContext: Authorization context utilities

Every command receives an ActorContext and only touches its company's data.
"""

default_app_config = "accounts.apps.AccountsConfig"
