"""
HTTP interface of CoinLedger.

FastAPI routers translate requests into use case commands and
use case results into Pydantic responses. The session token is
read from and written to the session cookie here, nowhere else.
"""
