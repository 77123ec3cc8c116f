"""Tenant Ledger View Service

Read-only aggregation over the property backend:
- Builds the tenant dashboard from independent data providers
- Reconciles the displayed balance against an unposted deposit
- Classifies the overdue roster into severity tiers
"""

__version__ = "1.0.0"
