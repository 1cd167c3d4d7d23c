"""Password hashing with scrypt.

Hashes are stored as ``scrypt$<n>$<r>$<p>$<salt>$<key>`` with base64 salt
and key, so cost parameters can be raised later without invalidating
existing hashes. Verification uses ``Scrypt.verify``, which compares in
constant time.
"""

import base64
import os

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ...infrastructure.config.settings import get_settings

ALGORITHM = "scrypt"
SALT_BYTES = 16
KEY_BYTES = 32


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def hash_password(password: str) -> str:
    settings = get_settings()
    n, r, p = settings.SCRYPT_N, settings.SCRYPT_R, settings.SCRYPT_P
    salt = os.urandom(SALT_BYTES)
    key = Scrypt(salt=salt, length=KEY_BYTES, n=n, r=r, p=p).derive(password.encode("utf-8"))
    return "$".join([ALGORITHM, str(n), str(r), str(p), _b64encode(salt), _b64encode(key)])


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash. Malformed hashes never verify."""
    try:
        algorithm, n, r, p, salt, key = password_hash.split("$")
        if algorithm != ALGORITHM:
            return False
        expected = base64.b64decode(key)
        kdf = Scrypt(salt=base64.b64decode(salt), length=len(expected), n=int(n), r=int(r), p=int(p))
    except ValueError:
        return False

    try:
        kdf.verify(password.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True
