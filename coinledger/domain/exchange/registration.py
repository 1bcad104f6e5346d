"""
Sign-up rules for new usernames and passwords.
"""

from typing import Container

MAX_USERNAME_LENGTH = 30
MIN_PASSWORD_LENGTH = 4

ENTER_USERNAME = "Please enter a username."
USERNAME_HAS_SPACES = "Username must not contain spaces."
USERNAME_TOO_LONG = "Username too long."
PASSWORD_TOO_SHORT = "Password too short."
PASSWORD_BLANK = "Password must contain a non-space character."
ACCEPT_AGREEMENT = "Please accept the user agreement."


def username_unavailable_message(username: str) -> str:
    return f"Username '{username}' is unavailable."


def sign_up_errors(
    username: str,
    password: str,
    agreement_accepted: bool,
    taken_usernames: Container[str],
) -> list[str]:
    """Return every sign-up rule the inputs break, in display order.

    ``username`` is expected to be stripped already. An empty password
    is reported as blank rather than too short.
    """
    checks = [
        (ENTER_USERNAME, not username),
        (USERNAME_HAS_SPACES, any(ch.isspace() for ch in username)),
        (USERNAME_TOO_LONG, len(username) > MAX_USERNAME_LENGTH),
        (username_unavailable_message(username), username in taken_usernames),
        (PASSWORD_TOO_SHORT, 0 < len(password) < MIN_PASSWORD_LENGTH),
        (PASSWORD_BLANK, not password.strip()),
        (ACCEPT_AGREEMENT, agreement_accepted is not True),
    ]
    return [message for message, failed in checks if failed]
