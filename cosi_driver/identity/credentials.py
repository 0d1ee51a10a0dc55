"""
Credential generation.
"""

import secrets
import string

from cosi_driver.identity.models import Credential

ACCESS_KEY_LENGTH = 20
SECRET_KEY_LENGTH = 40

_ACCESS_KEY_ALPHABET = string.ascii_uppercase + string.digits
_SECRET_KEY_ALPHABET = string.ascii_letters + string.digits + "+/"


def _random_string(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_credential() -> Credential:
    """
    Generate a fresh AWS-style key pair from the OS CSPRNG.

    Access keys are 20 upper-case alphanumerics, secret keys 40 characters
    of base64 alphabet.
    """
    return Credential(
        access_key=_random_string(_ACCESS_KEY_ALPHABET, ACCESS_KEY_LENGTH),
        secret_key=_random_string(_SECRET_KEY_ALPHABET, SECRET_KEY_LENGTH),
    )
