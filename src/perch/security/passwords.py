"""Password hashing with argon2id.

Hashes are PHC-format strings (``$argon2id$v=19$...``) produced by
``argon2-cffi``. The credential store keeps only these hashes.

Usage::

    from perch.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_ARGON2_PREFIX = "$argon2"

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with argon2id.

    Raises ``ValueError`` for an empty password.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """Check a password against a stored hash.

    Returns ``False`` for a mismatch, an empty password or an empty hash.
    Raises ``ValueError`` when the stored value is not an argon2 hash,
    which means the store was filled with plaintext by mistake.
    """
    if not password or not phc_hash:
        return False
    if not phc_hash.startswith(_ARGON2_PREFIX):
        msg = f"Unknown hash format: {phc_hash[:12]}..."
        raise ValueError(msg)
    try:
        return _hasher.verify(phc_hash, password)
    except VerificationError:
        return False
    except InvalidHashError as exc:
        msg = "Stored password hash is corrupt."
        raise ValueError(msg) from exc
