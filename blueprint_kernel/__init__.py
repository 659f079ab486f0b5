"""
Blueprint Kernel

Reusable document templates ("blueprints") and the contracts generated from
them, with:
- A fixed, forward-only contract lifecycle with a terminal revoke
- Field values frozen once a contract is locked or revoked
- A single application state facade persisted as a full snapshot
"""

__version__ = "0.1.0"
