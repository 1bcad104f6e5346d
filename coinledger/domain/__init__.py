"""
Domain layer package.

Accounts, balances, sessions and the trade admission rules.
Nothing here performs I/O; time and randomness are injected.
"""
