"""
Infrastructure adapters for the exchange bounded context.

Each adapter implements a domain port (ABC) and connects
to an external system: the SQL database or the market data API.
"""
