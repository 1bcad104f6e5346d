"""
Salted one-way password hashing.

Stored format: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
Plaintext passwords are never stored, logged or compared directly.
"""

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 100_000
SALT_BYTES = 16


def _derive(password: str, salt: str, iterations: int) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return digest.hex()


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Return a salted hash of ``password`` in the stored format."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{ALGORITHM}${iterations}${salt}${_derive(password, salt, iterations)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Return True if ``password`` hashes to ``stored_hash``.

    Malformed stored values never match.
    """
    try:
        algorithm, iterations, salt, expected = stored_hash.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != ALGORITHM:
        return False
    return hmac.compare_digest(_derive(password, salt, rounds), expected)
