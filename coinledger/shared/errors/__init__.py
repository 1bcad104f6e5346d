"""
Shared error handling package.

Translates exchange domain errors into JSON error bodies with
the matching HTTP status codes.
"""
