"""
Exchange bounded context — domain layer.

This module contains all domain logic for the exchange context:
- Accounts and balance mutations
- Session lifecycle and idle expiry
- Buy admissibility rules
"""
