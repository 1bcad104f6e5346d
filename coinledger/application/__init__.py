"""
Application layer package.

Use cases for signing up, signing in and out, viewing the portfolio,
quoting and buying coins. Each one checks the session first,
then works against the domain ports only.
"""
