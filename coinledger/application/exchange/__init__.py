"""
Application layer for the exchange bounded context.

Together the use cases here form the transaction engine: sign-up,
sign-in, sign-out, dashboard and purchase, gated by the session
manager. No framework or infrastructure imports allowed.
"""
