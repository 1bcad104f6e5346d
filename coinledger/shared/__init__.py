"""
Cross-cutting concerns shared by every layer.

- errors: exchange error to HTTP status mapping
- security: response headers and the sign-in rate limit
- logging: one-time logging setup
"""
